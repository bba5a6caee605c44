"""Tests for operator confirmation prompts."""

from unittest.mock import patch

from content_migrator.utils.prompts import always_yes, ask_operator, make_confirm


def test_always_yes():
    assert always_yes("Overwrite?") is True


@patch("content_migrator.utils.prompts.click.confirm", return_value=False)
def test_ask_operator_defaults_to_no(mock_confirm):
    assert ask_operator("Overwrite?") is False
    mock_confirm.assert_called_once_with("Overwrite?", default=False)


def test_make_confirm():
    assert make_confirm(True) is always_yes
    assert make_confirm(False) is ask_operator
