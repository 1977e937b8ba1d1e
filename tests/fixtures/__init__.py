"""Shared test fixtures and canned model responses for llmchain tests."""

__all__ = [
    "canned_responses",
]
