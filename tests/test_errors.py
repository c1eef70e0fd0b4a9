"""Failure taxonomy and remediation hint tests."""

from __future__ import annotations

import pytest

from CrptClient.errors import (
    AuthChallengeFailure,
    AuthFailure,
    DocumentRegistrationFailure,
    InvalidConfiguration,
    RegistryError,
    SigningFailure,
    TokenExchangeFailure,
    describe_failure,
)


@pytest.mark.parametrize(
    "error_type",
    [AuthChallengeFailure, TokenExchangeFailure],
)
def test_auth_failures_share_a_base(error_type) -> None:
    assert issubclass(error_type, AuthFailure)
    assert issubclass(error_type, RegistryError)


def test_registration_failure_is_not_an_auth_failure() -> None:
    assert not issubclass(DocumentRegistrationFailure, AuthFailure)


def test_metadata_is_retained() -> None:
    error = DocumentRegistrationFailure("boom", url="https://r.test", status_code=400)

    assert error.url == "https://r.test"
    assert error.status_code == 400
    assert error.details == {}


@pytest.mark.parametrize(
    ("error", "expected_message", "has_hint"),
    [
        (InvalidConfiguration("permits must be > 0"), "Invalid client configuration", True),
        (AuthChallengeFailure("x", status_code=503), "authentication challenge (HTTP 503)", True),
        (TokenExchangeFailure("x", status_code=403), "rejected the signed challenge", True),
        (TokenExchangeFailure("x"), "Could not exchange", True),
        (DocumentRegistrationFailure("x", status_code=401), "rejected the access token", True),
        (DocumentRegistrationFailure("x", status_code=422), "rejected the document", True),
        (DocumentRegistrationFailure("x", status_code=502), "Document registration failed", False),
        (SigningFailure("exit 2"), "Signing command failed", True),
        (RuntimeError("other"), "other", False),
    ],
)
def test_describe_failure(error, expected_message: str, has_hint: bool) -> None:
    message, hint = describe_failure(error)

    assert expected_message in message
    assert (hint is not None) is has_hint
