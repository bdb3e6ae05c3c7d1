"""
Tests for the provider factories.

Constructing LangChain chat models makes no network calls, so the real
classes are built here.
"""

import unittest

from lazyshell.providers.factories import (
    DEFAULT_TEMPERATURE,
    build_groq_model,
    build_lmstudio_model,
    build_ollama_model,
)


class TestFactories(unittest.TestCase):

    def test_ollama(self):
        from langchain_ollama import ChatOllama

        model = build_ollama_model("llama3.2", "http://localhost:11434", None, max_retries=1)

        self.assertIsInstance(model, ChatOllama)
        self.assertEqual(model.model, "llama3.2")
        self.assertEqual(model.base_url, "http://localhost:11434")
        self.assertEqual(model.temperature, DEFAULT_TEMPERATURE)

    def test_groq_uses_openai_compatible_endpoint(self):
        from langchain_openai import ChatOpenAI

        model = build_groq_model("llama-3.3-70b-versatile", None, "gsk_test")

        self.assertIsInstance(model, ChatOpenAI)
        self.assertEqual(model.model_name, "llama-3.3-70b-versatile")
        self.assertEqual(model.openai_api_base, "https://api.groq.com/openai/v1")

    def test_lmstudio_runs_without_key(self):
        model = build_lmstudio_model("qwen", None, "ignored", max_retries=1)

        self.assertEqual(model.openai_api_base, "http://localhost:1234/v1")
        self.assertEqual(model.max_retries, 1)


if __name__ == "__main__":
    unittest.main()
