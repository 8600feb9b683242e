"""Tests for top-level package lazy exports."""

from __future__ import annotations

import unittest

import chat_launcher


class PackageExportTests(unittest.TestCase):
    """Ensure __getattr__ and exported symbols behave as expected."""

    def test_lazy_exports_resolve_known_symbols(self) -> None:
        self.assertTrue(callable(chat_launcher.load_config))
        self.assertTrue(callable(chat_launcher.ensure_config_dir))
        self.assertIsNotNone(chat_launcher.SubmissionController)
        self.assertIsNotNone(chat_launcher.ControllerOptions)
        self.assertIsNotNone(chat_launcher.SettingsSync)
        self.assertIsNotNone(chat_launcher.HttpBackendGateway)
        self.assertIsNotNone(chat_launcher.Settings)
        self.assertIsNotNone(chat_launcher.LauncherError)
        self.assertIsNotNone(chat_launcher.BackendError)
        self.assertIsNotNone(chat_launcher.BackendUnavailableError)
        self.assertIsNotNone(chat_launcher.ConfigValidationError)
        self.assertIsNotNone(chat_launcher.SubmissionState)
        self.assertIsNotNone(chat_launcher.SubmitOutcome)

    def test_every_public_name_resolves(self) -> None:
        for name in chat_launcher.__all__:
            with self.subTest(name=name):
                self.assertIsNotNone(getattr(chat_launcher, name))

    def test_unknown_symbol_raises_attribute_error(self) -> None:
        with self.assertRaises(AttributeError):
            getattr(chat_launcher, "THIS_DOES_NOT_EXIST")


if __name__ == "__main__":
    unittest.main()
