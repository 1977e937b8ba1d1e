"""Prompt templates and their rendering against pipeline memory."""

from .template import INPUT_KEY, PromptTemplate, format_value, parse_template

__all__ = [
    "INPUT_KEY",
    "PromptTemplate",
    "format_value",
    "parse_template",
]
