"""Tests for prompt templates and truncation."""

import pytest

from claude_code_mcp.mcp.codec import decode_text, encode_text
from claude_code_mcp.mcp.errors import ToolNotFoundError
from claude_code_mcp.mcp.prompts import (
    DEFAULT_MAX_INPUT_LENGTH,
    PROMPT_TEMPLATES,
    TRUNCATION_MARKER,
    build_prompt,
    truncate_if_needed,
)
from claude_code_mcp.mcp.tools.definitions import TOOL_NAMES

CODE = 'def f(x):\n    return "x" * x\n'

COMPLETE_ARGUMENTS = {
    "explain_code": {"code": CODE, "context": "used in a loop"},
    "review_code": {"code": CODE, "focus_areas": "performance"},
    "fix_code": {"code": CODE, "issue_description": "fails for negative x"},
    "edit_code": {"code": CODE, "instructions": "add type hints"},
    "test_code": {"code": CODE, "test_framework": "pytest"},
    "simulate_command": {"command": "rm -rf build", "input": "y"},
    "your_own_query": {"query": "What is MCP?", "context": "briefly"},
}


class TestTruncation:

    def test_short_input_unchanged(self):
        assert truncate_if_needed("abc", 10) == "abc"

    def test_exact_length_unchanged(self):
        text = "a" * 10
        assert truncate_if_needed(text, 10) == text

    def test_long_input_truncated_with_marker(self):
        text = "a" * 11
        assert truncate_if_needed(text, 10) == "a" * 10 + TRUNCATION_MARKER

    def test_default_threshold(self):
        text = "b" * (DEFAULT_MAX_INPUT_LENGTH + 1)
        result = truncate_if_needed(text)
        assert result == "b" * DEFAULT_MAX_INPUT_LENGTH + TRUNCATION_MARKER

    def test_marker_contains_truncated(self):
        assert "[truncated]" in TRUNCATION_MARKER


class TestBuildPrompt:

    def test_every_tool_has_a_template(self):
        assert set(PROMPT_TEMPLATES) == set(TOOL_NAMES)

    @pytest.mark.parametrize("tool_name", sorted(COMPLETE_ARGUMENTS))
    def test_complete_arguments_build(self, tool_name):
        prompt = build_prompt(tool_name, COMPLETE_ARGUMENTS[tool_name])
        assert isinstance(prompt, str)
        assert prompt

    def test_explain_code(self):
        prompt = build_prompt("explain_code", {"code": CODE, "context": "ctx"})
        assert prompt == (
            f"Explain the following Base64 encoded code: \n{encode_text(CODE)}\nctx"
        )

    def test_explain_code_without_context(self):
        prompt = build_prompt("explain_code", {"code": CODE})
        assert prompt.endswith(encode_text(CODE) + "\n")

    def test_review_code(self):
        prompt = build_prompt("review_code", {"code": CODE, "focus_areas": "security"})
        assert prompt.startswith("Review the following Base64 encoded code")
        assert encode_text(CODE) in prompt
        assert prompt.endswith("Focus on: security")

    def test_fix_code(self):
        prompt = build_prompt(
            "fix_code", {"code": CODE, "issue_description": "off by one"}
        )
        assert "given the issue: off by one\n" in prompt
        assert prompt.endswith(encode_text(CODE))

    def test_edit_code(self):
        prompt = build_prompt("edit_code", {"code": CODE, "instructions": "rename f"})
        assert "as per instructions: rename f\n" in prompt
        assert prompt.endswith(encode_text(CODE))

    def test_test_code_uses_framework(self):
        prompt = build_prompt("test_code", {"code": CODE, "test_framework": "unittest"})
        assert "using unittest framework:\n" in prompt

    def test_test_code_default_framework(self):
        prompt = build_prompt("test_code", {"code": CODE, "test_framework": ""})
        assert "using default framework:\n" in prompt

    def test_simulate_command_inserts_raw_values(self):
        prompt = build_prompt("simulate_command", {"command": "ls -la", "input": "none"})
        assert prompt.startswith('User wants to run this command: "ls -la" with input: "none".')

    def test_your_own_query(self):
        prompt = build_prompt("your_own_query", {"query": "Why?", "context": "because"})
        assert prompt == "Query: Why? because"

    def test_code_with_quotes_and_newlines_survives(self):
        code = 'print("a")\nprint(\'b\')\n\x00\n'
        prompt = build_prompt("explain_code", {"code": code})
        encoded = prompt.split("\n")[1]
        assert decode_text(encoded) == code

    def test_unknown_tool(self):
        with pytest.raises(ToolNotFoundError):
            build_prompt("delete_everything", {"code": "x"})

    def test_non_string_values_are_stringified(self):
        prompt = build_prompt("your_own_query", {"query": 42, "context": None})
        assert prompt == "Query: 42 "


class TestBuildPromptTruncation:

    def test_long_code_is_truncated_before_encoding(self):
        code = "x" * (DEFAULT_MAX_INPUT_LENGTH + 1)
        prompt = build_prompt("explain_code", {"code": code})
        encoded = prompt.split("\n")[1]

        decoded = decode_text(encoded)
        assert decoded == "x" * DEFAULT_MAX_INPUT_LENGTH + TRUNCATION_MARKER
        assert encode_text(code) not in prompt

    def test_long_raw_argument_is_truncated(self):
        query = "q" * 50
        prompt = build_prompt("your_own_query", {"query": query}, max_length=20)
        assert prompt == "Query: " + "q" * 20 + TRUNCATION_MARKER + " "
        assert query not in prompt

    def test_custom_threshold(self):
        prompt = build_prompt("explain_code", {"code": "abcdef"}, max_length=3)
        assert decode_text(prompt.split("\n")[1]) == "abc" + TRUNCATION_MARKER
