"""Operator confirmation prompts.

Every decision point in a migration goes through a single ``ConfirmCallback``
so tests and force mode can answer without touching the terminal.
"""

from __future__ import annotations

import logging
from typing import Callable

import click

from content_migrator.utils.logging import log_with_context

ConfirmCallback = Callable[[str], bool]


def always_yes(prompt: str) -> bool:
    """Confirmation used in force mode."""
    log_with_context(logging.INFO, f"{prompt} (forced: yes)")
    return True


def ask_operator(prompt: str) -> bool:
    """Ask on the terminal; anything other than yes declines."""
    answer = click.confirm(prompt, default=False)
    log_with_context(logging.DEBUG, f"{prompt} -> {'yes' if answer else 'no'}")
    return answer


def make_confirm(force: bool) -> ConfirmCallback:
    """Return the confirmation callback for the current run mode."""
    return always_yes if force else ask_operator
