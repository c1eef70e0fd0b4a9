# === NAVMAP v1 ===
# {
#   "module": "CrptClient.errors",
#   "purpose": "Failure taxonomy and remediation hints for registry calls.",
#   "sections": [
#     {
#       "id": "registryerror",
#       "name": "RegistryError",
#       "anchor": "class-registryerror",
#       "kind": "class"
#     },
#     {
#       "id": "invalidconfiguration",
#       "name": "InvalidConfiguration",
#       "anchor": "class-invalidconfiguration",
#       "kind": "class"
#     },
#     {
#       "id": "authfailure",
#       "name": "AuthFailure",
#       "anchor": "class-authfailure",
#       "kind": "class"
#     },
#     {
#       "id": "documentregistrationfailure",
#       "name": "DocumentRegistrationFailure",
#       "anchor": "class-documentregistrationfailure",
#       "kind": "class"
#     },
#     {
#       "id": "describe-failure",
#       "name": "describe_failure",
#       "anchor": "function-describe-failure",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Failure taxonomy and remediation hints for registry calls.

Responsibilities
----------------
- Define the closed set of exception types raised by the client
  (``InvalidConfiguration``, ``AuthChallengeFailure``, ``TokenExchangeFailure``,
  ``DocumentRegistrationFailure``, ``SigningFailure``), each retaining the URL
  and HTTP status of the failed exchange when one is known.
- Translate failures into short user-facing remediation hints via
  :func:`describe_failure` for the command-line interface.

Design Notes
------------
- Every wrapping site chains the original exception (``raise ... from exc``)
  so the transport or parse error stays available as ``__cause__``.
- Nothing here retries; the client never degrades to a fallback mode.
"""

from __future__ import annotations

import logging
from typing import Any

__all__ = (
    "RegistryError",
    "InvalidConfiguration",
    "AuthFailure",
    "AuthChallengeFailure",
    "TokenExchangeFailure",
    "DocumentRegistrationFailure",
    "SigningFailure",
    "describe_failure",
)

LOGGER = logging.getLogger(__name__)


class RegistryError(Exception):
    """Base class for every failure raised by the registry client."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.details = details or {}


class InvalidConfiguration(RegistryError, ValueError):
    """Raised when the client is constructed with an unusable configuration."""


class AuthFailure(RegistryError):
    """Raised when an authentication token cannot be obtained."""


class AuthChallengeFailure(AuthFailure):
    """Raised when fetching the authentication challenge fails."""


class TokenExchangeFailure(AuthFailure):
    """Raised when exchanging the signed challenge for a token fails."""


class DocumentRegistrationFailure(RegistryError):
    """Raised when the registry does not accept a submitted document."""


class SigningFailure(RegistryError):
    """Raised by the bundled command signer when the signing command fails."""


def describe_failure(error: BaseException) -> tuple[str, str | None]:
    """Return a user-friendly message and an optional remediation hint.

    Args:
        error: Exception raised by the client.

    Returns:
        Tuple of ``(message, suggestion)`` where ``suggestion`` may be ``None``.

    Examples:
        >>> msg, hint = describe_failure(AuthChallengeFailure("boom", status_code=503))
        >>> msg
        'Could not fetch the authentication challenge (HTTP 503)'
    """

    status = getattr(error, "status_code", None)
    suffix = f" (HTTP {status})" if status else ""

    if isinstance(error, InvalidConfiguration):
        return (
            f"Invalid client configuration: {error}",
            "Check the rate limit (permits and window must be positive) and the config file",
        )
    if isinstance(error, AuthChallengeFailure):
        return (
            f"Could not fetch the authentication challenge{suffix}",
            "Verify that the registry is reachable and the challenge URL is correct",
        )
    if isinstance(error, TokenExchangeFailure):
        if status in (401, 403):
            return (
                f"The registry rejected the signed challenge{suffix}",
                "Check that the signing certificate is registered for this participant",
            )
        return (
            f"Could not exchange the signed challenge for a token{suffix}",
            "Verify the token URL and that the signer produces an attached signature",
        )
    if isinstance(error, DocumentRegistrationFailure):
        if status == 401:
            return (
                f"The registry rejected the access token{suffix}",
                "The token may have been revoked; retry to force a fresh authentication",
            )
        if status in (400, 422):
            return (
                f"The registry rejected the document{suffix}",
                "Validate the document fields and the detached signature",
            )
        return (f"Document registration failed{suffix}", None)
    if isinstance(error, SigningFailure):
        return (
            f"Signing command failed: {error}",
            "Run the signing command manually to check key access and output format",
        )
    return (str(error) or type(error).__name__, None)
