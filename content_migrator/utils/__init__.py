"""Shared utilities for API access, logging, and operator prompts."""

__all__ = [
    "api",
    "logging",
    "prompts",
]
