# === NAVMAP v1 ===
# {
#   "module": "CrptClient.auth",
#   "purpose": "Caching authenticator for the challenge/sign/token exchange.",
#   "sections": [
#     {
#       "id": "cachedtoken",
#       "name": "CachedToken",
#       "anchor": "class-cachedtoken",
#       "kind": "class"
#     },
#     {
#       "id": "cachingauthenticator",
#       "name": "CachingAuthenticator",
#       "anchor": "class-cachingauthenticator",
#       "kind": "class"
#     },
#     {
#       "id": "mask-token",
#       "name": "mask_token",
#       "anchor": "function-mask-token",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Caching authenticator for the challenge/sign/token exchange.

**Purpose**
-----------
Obtaining a registry token costs two rate-limited network calls and one
signature. :class:`CachingAuthenticator` performs that exchange once per token
lifetime and hands the cached token to every caller in between.

**Renewal**
-----------
1. GET the challenge ``{uuid, data}``.
2. Sign ``data`` with the caller's :class:`~CrptClient.protocols.Signer` and
   encode the signature.
3. POST ``{uuid, data=<encoded signature>}`` and read ``{token}``.

The new expiry is measured from the instant renewal *started*, so the
round-trip latency of the exchange never extends the token's assumed validity.

**Contract**
------------
- ``get_token()`` is safe for any number of concurrent callers. Renewal runs
  under a lock with a second cache check inside it: callers that queue behind
  an in-flight renewal reuse its token instead of renewing again.
- The token and its expiry are published together as one immutable
  :class:`CachedToken`, so the lock-free fast path never sees a mismatched pair.
- Failures are not retried. The previous cached token is left in place and the
  next call renews from scratch.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from CrptClient.errors import AuthChallengeFailure, InvalidConfiguration, TokenExchangeFailure
from CrptClient.models import APPLICATION_JSON, AuthChallenge, SignedChallenge, TokenResponse
from CrptClient.protocols import EndpointProvider, Signer, TextEncoder
from CrptClient.ratelimit import RateLimiter

LOGGER = logging.getLogger(__name__)


def mask_token(token: str) -> str:
    """Return a log-safe rendering of ``token``."""
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"


@dataclass(frozen=True)
class CachedToken:
    """Token value together with the monotonic instant it stops being used."""

    token: str | None
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return self.token is not None and now < self.expires_at


_EXPIRED = CachedToken(token=None, expires_at=float("-inf"))


class CachingAuthenticator:
    """Return a cached registry token, renewing it when it has expired."""

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        signer: Signer,
        encoder: TextEncoder,
        endpoints: EndpointProvider,
        rate_limiter: RateLimiter,
        token_lifetime_s: float,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        if token_lifetime_s <= 0:
            raise InvalidConfiguration(
                f"Token lifetime must be positive, got: {token_lifetime_s}",
                details={"token_lifetime_s": token_lifetime_s},
            )
        self._http = http_client
        self._signer = signer
        self._encoder = encoder
        self._endpoints = endpoints
        self._limiter = rate_limiter
        self._lifetime_s = token_lifetime_s
        self._now = now

        self._renew_lock = threading.Lock()
        self._cached = _EXPIRED

    @property
    def expires_at(self) -> float:
        """Monotonic instant after which the cached token is renewed."""
        return self._cached.expires_at

    def get_token(self) -> str:
        """Return a token that has not reached its expiry.

        Raises:
            AuthChallengeFailure: Fetching the challenge failed.
            TokenExchangeFailure: Exchanging the signed challenge failed.
        """
        cached = self._cached
        if cached.is_valid(self._now()):
            return cached.token  # type: ignore[return-value]

        with self._renew_lock:
            cached = self._cached
            started = self._now()
            if cached.is_valid(started):
                LOGGER.debug("Token renewed by a concurrent caller; reusing it")
                return cached.token  # type: ignore[return-value]

            token = self._renew()
            self._cached = CachedToken(token=token, expires_at=started + self._lifetime_s)

        LOGGER.info(
            "Registry token renewed",
            extra={"token": mask_token(token), "lifetime_s": self._lifetime_s},
        )
        return token

    def invalidate(self) -> None:
        """Drop the cached token so the next ``get_token()`` renews it."""
        with self._renew_lock:
            self._cached = _EXPIRED

    def _renew(self) -> str:
        challenge = self._fetch_challenge()
        signed = self._sign(challenge)
        return self._exchange(signed)

    def _fetch_challenge(self) -> AuthChallenge:
        url = self._endpoints.auth_challenge_url()
        status: int | None = None
        try:
            self._limiter.acquire()
            response = self._http.get(url)
            status = response.status_code
            response.raise_for_status()
            return AuthChallenge.model_validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as exc:
            LOGGER.warning(
                "Fetching auth challenge failed",
                extra={"url": url, "status": status, "error": str(exc)},
            )
            raise AuthChallengeFailure(
                f"Fetching auth challenge failed: {exc}", url=url, status_code=status
            ) from exc

    def _sign(self, challenge: AuthChallenge) -> SignedChallenge:
        signature = self._signer.sign(challenge.data)
        return SignedChallenge(uuid=challenge.uuid, data=self._encoder.encode(signature))

    def _exchange(self, signed: SignedChallenge) -> str:
        url = self._endpoints.token_url()
        status: int | None = None
        try:
            self._limiter.acquire()
            response = self._http.post(
                url,
                content=signed.model_dump_json(),
                headers={"Content-Type": APPLICATION_JSON},
            )
            status = response.status_code
            response.raise_for_status()
            return TokenResponse.model_validate_json(response.content).token
        except (httpx.HTTPError, ValidationError) as exc:
            LOGGER.warning(
                "Token exchange failed",
                extra={"url": url, "status": status, "error": str(exc)},
            )
            raise TokenExchangeFailure(
                f"Token exchange failed: {exc}", url=url, status_code=status
            ) from exc
