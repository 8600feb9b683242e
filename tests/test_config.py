"""Tests for configuration loading and validation."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
import unittest

from chat_launcher.config import DEFAULT_CONFIG, ensure_config_dir, load_config
from chat_launcher.controller import ControllerOptions


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def _load(self, text: str | None) -> dict:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            if text is not None:
                config_path.write_text(text.strip(), encoding="utf-8")
            return load_config(config_path=config_path)

    def test_missing_config_uses_defaults(self) -> None:
        config = self._load(None)
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertEqual(config["submission"]["max_length"], 5000)
        self.assertEqual(config["submission"]["timeout_seconds"], 10.0)
        self.assertEqual(config["submission"]["focus_debounce_seconds"], 0.1)
        self.assertEqual(config["submission"]["error_revert_seconds"], 2.5)
        self.assertEqual(config["backend"]["url"], "http://127.0.0.1:7345")
        self.assertEqual(set(config["app"]), {"title"})

    def test_partial_config_overrides_selected_values(self) -> None:
        config = self._load(
            """
[submission]
timeout_seconds = 4

[ui]
placeholder_continue = "Keep going..."

[keybinds]
toggle_new_chat = "CTRL+T"
            """
        )
        self.assertEqual(config["submission"]["timeout_seconds"], 4.0)
        self.assertEqual(config["submission"]["max_length"], 5000)
        self.assertEqual(config["ui"]["placeholder_continue"], "Keep going...")
        self.assertEqual(config["keybinds"]["toggle_new_chat"], "ctrl+t")
        self.assertEqual(config["app"]["title"], DEFAULT_CONFIG["app"]["title"])

    def test_unknown_keys_are_ignored(self) -> None:
        config = self._load(
            """
[app]
title = "Ask"
class = "legacy-window"
            """
        )
        self.assertEqual(config["app"], {"title": "Ask"})

    def test_trailing_slash_is_stripped_from_backend_url(self) -> None:
        config = self._load(
            """
[backend]
url = "http://localhost:9000/"
            """
        )
        self.assertEqual(config["backend"]["url"], "http://localhost:9000")

    def test_invalid_values_fallback_to_defaults(self) -> None:
        config = self._load(
            """
[submission]
max_length = 0
timeout_seconds = -1

[keybinds]
cancel = ""
            """
        )
        self.assertEqual(config, DEFAULT_CONFIG)

    def test_duplicate_keybinds_fallback_to_defaults(self) -> None:
        config = self._load(
            """
[keybinds]
cancel = "ctrl+n"
            """
        )
        self.assertEqual(config["keybinds"], DEFAULT_CONFIG["keybinds"])

    def test_unparseable_toml_falls_back_to_defaults(self) -> None:
        config = self._load("[submission\nmax_length = ")
        self.assertEqual(config, DEFAULT_CONFIG)

    def test_remote_backend_disallowed_by_default_policy(self) -> None:
        config = self._load(
            """
[backend]
url = "http://example.com:7345"
            """
        )
        self.assertEqual(config["backend"]["url"], DEFAULT_CONFIG["backend"]["url"])
        self.assertFalse(config["security"]["allow_remote_hosts"])

    def test_remote_backend_allowed_when_policy_enabled(self) -> None:
        config = self._load(
            """
[backend]
url = "https://example.com"

[security]
allow_remote_hosts = true
            """
        )
        self.assertEqual(config["backend"]["url"], "https://example.com")

    def test_non_http_scheme_rejected(self) -> None:
        config = self._load(
            """
[backend]
url = "ftp://localhost"
            """
        )
        self.assertEqual(config["backend"]["url"], DEFAULT_CONFIG["backend"]["url"])

    @unittest.skipUnless(os.name == "posix", "POSIX permissions only")
    def test_config_file_permissions_are_tightened(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[app]\ntitle = \"Ask\"\n", encoding="utf-8")
            config_path.chmod(0o644)
            config = load_config(config_path=config_path)
            self.assertEqual(config["app"]["title"], "Ask")
            self.assertEqual(config_path.stat().st_mode & 0o777, 0o600)

    def test_ensure_config_dir_creates_directory(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            target = Path(temp_dir) / "nested" / "chat-launcher"
            self.assertEqual(ensure_config_dir(target), target)
            self.assertTrue(target.is_dir())

    def test_controller_options_follow_config(self) -> None:
        config = self._load(
            """
[submission]
max_length = 120
error_revert_seconds = 1.5

[keybinds]
cancel = "ctrl+q"
            """
        )
        options = ControllerOptions.from_config(config)
        self.assertEqual(options.max_length, 120)
        self.assertEqual(options.error_revert, 1.5)
        self.assertEqual(options.cancel_key, "ctrl+q")
        self.assertEqual(options.submit_key, "enter")


if __name__ == "__main__":
    unittest.main()
