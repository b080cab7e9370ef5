"""Unit tests for whole-message redaction."""

from __future__ import annotations

import pytest

from rest_errors.core.redaction import Redactor
from rest_errors.core.redaction import get_redactor
from rest_errors.core.redaction import redact


@pytest.mark.parametrize(
    "message",
    [
        "password=hunter2",
        "invalid client secret supplied",
        "the token expired at noon",
        "bad connection string for postgres",
        "prefix-passwordsuffix",
    ],
)
def test_messages_with_sensitive_terms_are_fully_masked(message: str) -> None:
    assert redact(message) == "[MASKED]"


@pytest.mark.parametrize(
    "message",
    [
        "Client not found",
        "duplicate key value violates unique constraint",
        "Password reset required",
        "TOKEN header is absent",
        "",
    ],
)
def test_messages_without_sensitive_terms_pass_through(message: str) -> None:
    assert redact(message) == message


def test_none_message_redacts_to_empty_string() -> None:
    assert redact(None) == ""


def test_custom_patterns_and_mask_are_honoured() -> None:
    redactor = Redactor([r"api[_-]key", "ssn"], "***")

    assert redactor.redact("missing api_key header") == "***"
    assert redactor.redact("ssn 123") == "***"
    assert redactor.redact("password is fine here") == "password is fine here"
    assert redactor.mask == "***"


def test_redactor_follows_environment_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REST_ERRORS_SENSITIVE_PATTERNS", "internal, stacktrace")
    monkeypatch.setenv("REST_ERRORS_MASK", "<hidden>")

    assert redact("internal host db-3 unreachable") == "<hidden>"
    assert redact("a token is fine now") == "a token is fine now"
    assert get_redactor() is get_redactor()
