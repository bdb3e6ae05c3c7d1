"""
Tests for structured command generation and its free-text fallback.
"""

import unittest
from unittest.mock import MagicMock

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from pydantic import ValidationError

from lazyshell.core.generator import (
    AgentCommand,
    Command,
    CommandWithExplanation,
    generate_agent_command,
    generate_command,
    generate_command_struct,
)
from lazyshell.exceptions import GenerationError
from lazyshell.providers.model import ModelConfig

SYSTEM = "<role>test</role>"


def make_config(structured=None, structured_error=None, text=None, text_error=None):
    """ModelConfig around a mock chat model."""
    handle = MagicMock()
    runnable = handle.with_structured_output.return_value
    if structured_error is not None:
        runnable.invoke.side_effect = structured_error
    else:
        runnable.invoke.return_value = structured
    if text_error is not None:
        handle.invoke.side_effect = text_error
    else:
        handle.invoke.return_value = AIMessage(content=text or "")
    return ModelConfig(provider="fake", model_id="fake-1", model_handle=handle)


class TestGenerateCommand(unittest.TestCase):

    def test_returns_trimmed_text(self):
        config = make_config(text="  ls -la\n")

        self.assertEqual(generate_command("list files", config, SYSTEM), "ls -la")

    def test_sends_system_then_user_message(self):
        config = make_config(text="pwd")

        generate_command("where am i", config, SYSTEM)

        messages = config.model_handle.invoke.call_args.args[0]
        self.assertIsInstance(messages[0], SystemMessage)
        self.assertEqual(messages[0].content, SYSTEM)
        self.assertIsInstance(messages[1], HumanMessage)
        self.assertEqual(messages[1].content, "where am i")

    def test_list_content_is_joined(self):
        config = make_config()
        config.model_handle.invoke.return_value = AIMessage(
            content=[{"type": "text", "text": "git status"}]
        )

        self.assertEqual(generate_command("status", config, SYSTEM), "git status")

    def test_handle_used_as_built(self):
        config = make_config(text="ls")
        config.temperature = 0.7

        generate_command("list", config, SYSTEM)

        config.model_handle.invoke.assert_called_once()
        config.model_handle.bind.assert_not_called()


class TestGenerateCommandStruct(unittest.TestCase):

    def test_structured_result_returned(self):
        expected = CommandWithExplanation(command="du -sh .", explanation="Disk usage")
        config = make_config(structured=expected)

        result = generate_command_struct("disk usage", config, system_prompt=SYSTEM)

        self.assertEqual(result, expected)
        config.model_handle.with_structured_output.assert_called_once_with(
            CommandWithExplanation
        )
        config.model_handle.invoke.assert_not_called()

    def test_dict_result_is_validated(self):
        config = make_config(structured={"command": "ls", "explanation": "List"})

        result = generate_command_struct("list", config, system_prompt=SYSTEM)

        self.assertIsInstance(result, CommandWithExplanation)
        self.assertEqual(result.command, "ls")

    def test_command_only_schema(self):
        config = make_config(structured=Command(command="ls"))

        result = generate_command_struct(
            "list", config, include_explanation=False, system_prompt=SYSTEM
        )

        self.assertEqual(result.command, "ls")
        config.model_handle.with_structured_output.assert_called_once_with(Command)

    def test_falls_back_to_free_text_on_error(self):
        config = make_config(structured_error=ValueError("bad json"), text=" ls -la ")

        with self.assertLogs("lazyshell.core.generator", level="WARNING"):
            result = generate_command_struct("list files", config, system_prompt=SYSTEM)

        self.assertIsInstance(result, CommandWithExplanation)
        self.assertEqual(result.command, "ls -la")
        self.assertEqual(result.explanation, "")

    def test_falls_back_when_structured_output_is_empty(self):
        config = make_config(structured=None, text="whoami")

        with self.assertLogs("lazyshell.core.generator", level="WARNING"):
            result = generate_command_struct("who", config, system_prompt=SYSTEM)

        self.assertEqual(result.command, "whoami")

    def test_both_paths_failing_raises_generation_error(self):
        config = make_config(
            structured_error=ValueError("bad json"),
            text_error=ConnectionError("network down"),
        )

        with self.assertLogs("lazyshell.core.generator", level="WARNING"):
            with self.assertRaises(GenerationError) as context:
                generate_command_struct("list", config, system_prompt=SYSTEM)
        self.assertIsInstance(context.exception.__cause__, ConnectionError)


class TestGenerateAgentCommand(unittest.TestCase):

    def test_returns_agent_command(self):
        config = make_config(structured={
            "command": "rm -rf build",
            "explanation": "Remove build dir",
            "safe": False,
            "reasoning": "Deletes files",
        })

        result = generate_agent_command("clean", config, system_prompt=SYSTEM)

        self.assertIsInstance(result, AgentCommand)
        self.assertFalse(result.safe)
        config.model_handle.with_structured_output.assert_called_once_with(AgentCommand)

    def test_no_free_text_fallback(self):
        config = make_config(structured_error=ValueError("bad json"), text="ls")

        with self.assertRaises(ValueError):
            generate_agent_command("list", config, system_prompt=SYSTEM)
        config.model_handle.invoke.assert_not_called()

    def test_missing_safety_field_is_rejected(self):
        config = make_config(structured={"command": "ls", "explanation": "List"})

        with self.assertRaises(ValidationError):
            generate_agent_command("list", config, system_prompt=SYSTEM)


if __name__ == "__main__":
    unittest.main()
