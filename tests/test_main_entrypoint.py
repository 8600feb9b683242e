"""Tests for CLI entrypoint wiring."""

from __future__ import annotations

import contextlib
import io
from pathlib import Path
import unittest
from unittest.mock import patch

from chat_launcher.__main__ import main


class MainEntrypointTests(unittest.TestCase):
    """Validate top-level main() behavior."""

    def test_main_ensures_config_and_runs_app(self) -> None:
        with patch("chat_launcher.__main__.ensure_config_dir") as ensure_mock, patch(
            "chat_launcher.__main__.LauncherApp"
        ) as app_cls_mock:
            app_instance = app_cls_mock.return_value
            main([])
            ensure_mock.assert_called_once()
            app_cls_mock.assert_called_once_with(config_path=None)
            app_instance.run.assert_called_once()

    def test_explicit_config_path_is_passed_through(self) -> None:
        with patch("chat_launcher.__main__.ensure_config_dir") as ensure_mock, patch(
            "chat_launcher.__main__.LauncherApp"
        ) as app_cls_mock:
            main(["--config", "/tmp/launcher.toml"])
            ensure_mock.assert_not_called()
            app_cls_mock.assert_called_once_with(config_path=Path("/tmp/launcher.toml"))

    def test_version_flag_prints_and_exits(self) -> None:
        buffer = io.StringIO()
        with patch("chat_launcher.__main__.LauncherApp") as app_cls_mock:
            with contextlib.redirect_stdout(buffer):
                main(["--version"])
            app_cls_mock.assert_not_called()
        self.assertTrue(buffer.getvalue().startswith("chat-launcher "))


if __name__ == "__main__":
    unittest.main()
