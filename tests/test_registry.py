"""
Tests for the provider registry.

Factories are swapped for fakes so no provider SDK is ever constructed.
"""

import dataclasses
import unittest
from unittest.mock import MagicMock, patch

from lazyshell.exceptions import ConfigurationError
from lazyshell.providers import registry
from lazyshell.providers.factories import DEFAULT_TEMPERATURE
from lazyshell.providers.registry import (
    PROVIDERS,
    get_available_providers,
    get_provider,
    resolve,
)


def fake_providers(factory):
    """Copy of the registry with every factory replaced by ``factory``."""
    return {
        key: dataclasses.replace(descriptor, factory=factory)
        for key, descriptor in PROVIDERS.items()
    }


class TestProviderTable(unittest.TestCase):

    def test_expected_providers_registered(self):
        for key in ("groq", "google", "openrouter", "anthropic", "openai",
                    "ollama", "mistral", "lmstudio", "openaiCompatible"):
            self.assertIn(key, PROVIDERS)
            self.assertEqual(PROVIDERS[key].key, key)

    def test_table_is_read_only(self):
        with self.assertRaises(TypeError):
            PROVIDERS["custom"] = PROVIDERS["groq"]

    def test_available_providers_in_registry_order(self):
        keys = get_available_providers()

        self.assertEqual(keys, list(PROVIDERS))
        self.assertEqual(keys[0], "groq")

    def test_descriptors_are_frozen(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            PROVIDERS["groq"].default_model_id = "other"

    def test_local_providers_need_no_key(self):
        self.assertFalse(PROVIDERS["ollama"].requires_api_key)
        self.assertFalse(PROVIDERS["lmstudio"].requires_api_key)
        self.assertFalse(PROVIDERS["openaiCompatible"].requires_api_key)
        self.assertTrue(PROVIDERS["groq"].requires_api_key)

    def test_unknown_provider_lists_supported_keys(self):
        with self.assertRaises(ConfigurationError) as context:
            get_provider("foo")
        self.assertIn("foo", str(context.exception))
        self.assertIn("groq", str(context.exception))


class TestResolve(unittest.TestCase):

    def setUp(self):
        self.factory = MagicMock(return_value="handle")
        patcher = patch.object(registry, "PROVIDERS", fake_providers(self.factory))
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_explicit_key_beats_environment(self):
        resolve("groq", api_key="A", environ={"GROQ_API_KEY": "B"})

        args = self.factory.call_args.args
        self.assertEqual(args[2], "A")

    def test_environment_key_used_when_no_explicit_key(self):
        resolve("groq", environ={"GROQ_API_KEY": "B"})

        self.assertEqual(self.factory.call_args.args[2], "B")

    def test_missing_required_key_raises(self):
        with self.assertRaises(ConfigurationError) as context:
            resolve("anthropic", environ={})
        self.assertIn("ANTHROPIC_API_KEY", str(context.exception))
        self.factory.assert_not_called()

    def test_empty_environment_key_counts_as_missing(self):
        with self.assertRaises(ConfigurationError):
            resolve("openai", environ={"OPENAI_API_KEY": ""})

    def test_unknown_provider_raises_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            resolve("foo", environ={})
        self.factory.assert_not_called()

    def test_defaults_fill_model_and_base_url(self):
        config = resolve("ollama", environ={})

        self.assertEqual(config.provider, "ollama")
        self.assertEqual(config.model_id, "llama3.2")
        self.assertEqual(config.model_handle, "handle")
        self.assertEqual(self.factory.call_args.args[1], "http://localhost:11434")

    def test_overrides_are_passed_through(self):
        config = resolve(
            "lmstudio", model_id="qwen", base_url="http://box:1234/v1", environ={}
        )

        self.assertEqual(config.model_id, "qwen")
        self.assertEqual(self.factory.call_args.args[:2], ("qwen", "http://box:1234/v1"))

    def test_optional_key_provider_resolves_without_key(self):
        config = resolve("openaiCompatible", environ={})

        self.assertEqual(config.provider, "openaiCompatible")
        self.assertIsNone(self.factory.call_args.args[2])

    def test_temperature_and_retries_forwarded(self):
        config = resolve("ollama", environ={})

        kwargs = self.factory.call_args.kwargs
        self.assertEqual(kwargs["temperature"], DEFAULT_TEMPERATURE)
        self.assertEqual(kwargs["max_retries"], 1)
        self.assertEqual(config.temperature, DEFAULT_TEMPERATURE)
        self.assertEqual(config.max_retries, 1)

    def test_cloud_provider_keeps_sdk_retry_default(self):
        config = resolve("groq", environ={"GROQ_API_KEY": "k"})

        self.assertIsNone(config.max_retries)
        self.assertIsNone(self.factory.call_args.kwargs["max_retries"])

    def test_factory_failure_becomes_configuration_error(self):
        self.factory.side_effect = RuntimeError("SDK not installed")

        with self.assertRaises(ConfigurationError) as context:
            resolve("ollama", environ={})
        self.assertIn("SDK not installed", str(context.exception))
        self.assertIsInstance(context.exception.__cause__, RuntimeError)

    def test_each_resolution_builds_a_fresh_config(self):
        self.factory.side_effect = lambda *args, **kwargs: object()

        first = resolve("ollama", environ={})
        second = resolve("ollama", environ={})

        self.assertIsNot(first, second)
        self.assertIsNot(first.model_handle, second.model_handle)

    def test_environment_mapping_not_mutated(self):
        environ = {"GROQ_API_KEY": "B"}

        resolve("groq", api_key="A", environ=environ)

        self.assertEqual(environ, {"GROQ_API_KEY": "B"})


if __name__ == "__main__":
    unittest.main()
