"""
Prompt templates for each tool.

``build_prompt`` turns a tool name and its arguments into the text fed
to ``claude --print`` on stdin. Code arguments are base64-encoded so that
quotes, newlines and control characters survive a single-line template
untouched; every other argument is inserted raw.
"""

import logging
from typing import Callable, Dict, Mapping

from .codec import encode_text
from .errors import ToolNotFoundError
from .tools.definitions import get_tool_definition

logger = logging.getLogger(__name__)

DEFAULT_MAX_INPUT_LENGTH = 10000
TRUNCATION_MARKER = "... [truncated]"


def truncate_if_needed(text: str, max_length: int = DEFAULT_MAX_INPUT_LENGTH) -> str:
    """Cut text to max_length characters and append TRUNCATION_MARKER."""
    if len(text) > max_length:
        logger.warning(
            "Input too long, truncating (%d -> %d characters)", len(text), max_length
        )
        return text[:max_length] + TRUNCATION_MARKER
    return text


def _explain_code(args: Dict[str, str]) -> str:
    return (
        f"Explain the following Base64 encoded code: \n"
        f"{encode_text(args['code'])}\n{args['context']}"
    )


def _review_code(args: Dict[str, str]) -> str:
    return (
        f"Review the following Base64 encoded code (decode it to view original): \n"
        f"{encode_text(args['code'])}\nFocus on: {args['focus_areas']}"
    )


def _fix_code(args: Dict[str, str]) -> str:
    return (
        f"Fix the following Base64 encoded code (decode it to view original) "
        f"given the issue: {args['issue_description']}\n{encode_text(args['code'])}"
    )


def _edit_code(args: Dict[str, str]) -> str:
    return (
        f"Edit the following Base64 encoded code (decode it to view original) "
        f"as per instructions: {args['instructions']}\n{encode_text(args['code'])}"
    )


def _test_code(args: Dict[str, str]) -> str:
    framework = args["test_framework"] or "default"
    return (
        f"Generate tests for the following Base64 encoded code (decode it to view "
        f"original) using {framework} framework:\n{encode_text(args['code'])}"
    )


def _simulate_command(args: Dict[str, str]) -> str:
    return (
        f'User wants to run this command: "{args["command"]}" with input: '
        f'"{args["input"]}". Please explain the assumption how this command works '
        f"and what it does if this command executed with this input."
    )


def _your_own_query(args: Dict[str, str]) -> str:
    return f"Query: {args['query']} {args['context']}"


PROMPT_TEMPLATES: Dict[str, Callable[[Dict[str, str]], str]] = {
    "explain_code": _explain_code,
    "review_code": _review_code,
    "fix_code": _fix_code,
    "edit_code": _edit_code,
    "test_code": _test_code,
    "simulate_command": _simulate_command,
    "your_own_query": _your_own_query,
}


def build_prompt(
    tool_name: str,
    arguments: Mapping[str, object],
    max_length: int = DEFAULT_MAX_INPUT_LENGTH,
) -> str:
    """
    Build the prompt for a tool invocation.

    Args:
        tool_name: One of the names in PROMPT_TEMPLATES
        arguments: Tool arguments; missing optional values become ""
        max_length: Per-argument truncation threshold

    Returns:
        Prompt text for the external command

    Raises:
        ToolNotFoundError: If tool_name has no template
    """
    template = PROMPT_TEMPLATES.get(tool_name)
    if template is None:
        raise ToolNotFoundError(tool_name)

    values: Dict[str, str] = {}
    for param in get_tool_definition(tool_name).parameters:
        value = arguments.get(param.name)
        text = "" if value is None else str(value)
        values[param.name] = truncate_if_needed(text, max_length)

    return template(values)
