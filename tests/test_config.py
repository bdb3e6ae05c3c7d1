"""
Tests for config loading, saving and validation.
"""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from lazyshell import __version__
from lazyshell.core.configs import (
    PersistedConfig,
    get_config_path,
    load_environment,
    load_persisted_config,
    save_persisted_config,
    validate_config,
)


class TestPersistedConfig(unittest.TestCase):
    """Test cases for the JSON config file."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = Path(self.temp_dir) / "config.json"

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, content: str) -> None:
        self.config_file.write_text(content, encoding="utf-8")

    def test_missing_file_returns_none(self):
        self.assertIsNone(load_persisted_config(self.config_file))

    def test_load_reads_camel_case_keys(self):
        self._write(json.dumps({
            "provider": "openaiCompatible",
            "apiKey": "secret",
            "model": "qwen2.5-coder",
            "baseUrl": "http://box:8000/v1",
            "version": "0.2.0",
        }))

        config = load_persisted_config(self.config_file)

        self.assertEqual(config.provider, "openaiCompatible")
        self.assertEqual(config.api_key, "secret")
        self.assertEqual(config.model, "qwen2.5-coder")
        self.assertEqual(config.base_url, "http://box:8000/v1")
        self.assertEqual(config.version, "0.2.0")

    def test_invalid_json_returns_none(self):
        self._write("{not json")

        with self.assertLogs("lazyshell.core.configs", level="WARNING"):
            self.assertIsNone(load_persisted_config(self.config_file))

    def test_unknown_provider_returns_none(self):
        self._write(json.dumps({"provider": "foo", "version": "1"}))

        with self.assertLogs("lazyshell.core.configs", level="WARNING"):
            self.assertIsNone(load_persisted_config(self.config_file))

    def test_missing_provider_returns_none(self):
        self._write(json.dumps({"apiKey": "k"}))

        with self.assertLogs("lazyshell.core.configs", level="WARNING"):
            self.assertIsNone(load_persisted_config(self.config_file))

    def test_non_object_returns_none(self):
        self._write(json.dumps(["groq"]))

        with self.assertLogs("lazyshell.core.configs", level="WARNING"):
            self.assertIsNone(load_persisted_config(self.config_file))

    def test_save_writes_exact_schema(self):
        config = PersistedConfig(provider="groq", api_key="k", model="llama")

        self.assertTrue(save_persisted_config(config, self.config_file))

        data = json.loads(self.config_file.read_text(encoding="utf-8"))
        self.assertEqual(
            data,
            {"provider": "groq", "apiKey": "k", "model": "llama", "version": __version__},
        )

    def test_save_creates_parent_directory(self):
        path = Path(self.temp_dir) / "nested" / "config.json"

        self.assertTrue(save_persisted_config(PersistedConfig(provider="ollama"), path))
        self.assertEqual(load_persisted_config(path).provider, "ollama")

    def test_config_dir_override(self):
        with patch.dict(os.environ, {"LAZYSHELL_CONFIG_DIR": self.temp_dir}):
            self.assertEqual(get_config_path(), self.config_file)


class TestValidateConfig(unittest.TestCase):

    def test_local_providers_need_no_key(self):
        for provider in ("ollama", "lmstudio", "openaiCompatible"):
            self.assertTrue(validate_config(PersistedConfig(provider=provider), environ={}))

    def test_key_in_file(self):
        self.assertTrue(validate_config(PersistedConfig(provider="groq", api_key="k"), environ={}))

    def test_key_in_environment(self):
        config = PersistedConfig(provider="anthropic")

        self.assertTrue(validate_config(config, environ={"ANTHROPIC_API_KEY": "a"}))

    def test_missing_or_blank_key(self):
        self.assertFalse(validate_config(PersistedConfig(provider="groq"), environ={}))
        self.assertFalse(
            validate_config(PersistedConfig(provider="groq", api_key="   "), environ={})
        )


class TestLoadEnvironment(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.dotenv = Path(self.temp_dir) / ".env"

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_dotenv_values_sit_under_real_environment(self):
        self.dotenv.write_text("GROQ_API_KEY=from-file\nMISTRAL_API_KEY=mistral\n")

        with patch.dict(os.environ, {"GROQ_API_KEY": "from-env"}, clear=True):
            environ = load_environment(self.dotenv)
            self.assertNotIn("MISTRAL_API_KEY", os.environ)

        self.assertEqual(environ["GROQ_API_KEY"], "from-env")
        self.assertEqual(environ["MISTRAL_API_KEY"], "mistral")


if __name__ == "__main__":
    unittest.main()
