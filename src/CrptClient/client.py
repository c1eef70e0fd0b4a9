# === NAVMAP v1 ===
# {
#   "module": "CrptClient.client",
#   "purpose": "Public facade: rate-limited, token-caching registry client.",
#   "sections": [
#     {
#       "id": "crptapi",
#       "name": "CrptApi",
#       "anchor": "class-crptapi",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Public facade: rate-limited, token-caching registry client.

**Usage**

    api = CrptApi(RateBudget(permits=10, window_s=1.0), signer=my_signer)
    registry_id = api.create_document(document, signature)

One :class:`CrptApi` instance is meant to be shared by all threads of a
process: its rate limiter counts the aggregate traffic (token renewals and
document submissions alike) and its authenticator amortizes one token across
every caller.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from CrptClient.auth import CachingAuthenticator
from CrptClient.config.models import ClientConfig
from CrptClient.documents import DocumentRegistrar
from CrptClient.models import DocumentData, DocumentType
from CrptClient.protocols import (
    Base64TextEncoder,
    EndpointProvider,
    RegistryEndpoints,
    Signer,
    TextEncoder,
)
from CrptClient.ratelimit import RateBudget, RateLimiter
from CrptClient.transport import build_http_client

LOGGER = logging.getLogger(__name__)


class CrptApi:
    """Thread-safe client for registering documents with the registry.

    Args:
        rate_budget: Request ceiling shared by every outbound call.
        signer: Signs authentication challenges with the participant's key.
        config: Endpoints, HTTP settings, token lifetime and document defaults.
        token_lifetime_s: Overrides ``config.token_lifetime_s`` (default 10 hours).
        http_client: Pre-built HTTPX client; left open by :meth:`close`.
        endpoints: Endpoint provider; defaults to ``config.endpoints``.
        encoder: Text encoder; defaults to Base64.

    Raises:
        InvalidConfiguration: ``rate_budget`` is not a valid budget, or the
            token lifetime is not positive.
    """

    def __init__(
        self,
        rate_budget: RateBudget,
        signer: Signer,
        *,
        config: Optional[ClientConfig] = None,
        token_lifetime_s: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        endpoints: Optional[EndpointProvider] = None,
        encoder: Optional[TextEncoder] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.rate_limiter = RateLimiter(rate_budget)

        self._owns_http = http_client is None
        self._http = http_client or build_http_client(self.config.http)
        endpoints = endpoints or RegistryEndpoints(self.config.endpoints)
        encoder = encoder or Base64TextEncoder()

        self.authenticator = CachingAuthenticator(
            http_client=self._http,
            signer=signer,
            encoder=encoder,
            endpoints=endpoints,
            rate_limiter=self.rate_limiter,
            token_lifetime_s=(
                token_lifetime_s if token_lifetime_s is not None else self.config.token_lifetime_s
            ),
        )
        self.registrar = DocumentRegistrar(
            http_client=self._http,
            encoder=encoder,
            endpoints=endpoints,
            rate_limiter=self.rate_limiter,
            document_format=self.config.document_format,
        )

        LOGGER.debug(
            "CrptApi initialized",
            extra={"budget": str(rate_budget), "config_hash": self.config.config_hash()[:8]},
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        signer: Signer,
        *,
        http_client: Optional[httpx.Client] = None,
    ) -> CrptApi:
        """Build a client whose rate budget comes from ``config.rate_limit``."""
        return cls(
            config.rate_limit.to_budget(),
            signer,
            config=config,
            http_client=http_client,
        )

    def register_document(
        self,
        document_payload: str,
        signature: str,
        *,
        product_group: Optional[str] = None,
        document_type: DocumentType = DocumentType.LP_INTRODUCE_GOODS,
    ) -> str:
        """Register a pre-serialized document and return its registry identifier.

        ``product_group=None`` falls back to ``config.product_group``.

        Raises:
            AuthChallengeFailure: Fetching the authentication challenge failed.
            TokenExchangeFailure: Exchanging the signed challenge failed.
            DocumentRegistrationFailure: Submitting the document failed.
        """
        token = self.authenticator.get_token()
        return self.registrar.register(
            document_payload,
            signature,
            token,
            product_group=product_group if product_group is not None else self.config.product_group,
            document_type=document_type,
        )

    def create_document(
        self,
        document: DocumentData,
        signature: str,
        *,
        product_group: Optional[str] = None,
        document_type: DocumentType = DocumentType.LP_INTRODUCE_GOODS,
    ) -> str:
        """Serialize ``document`` and register it; see :meth:`register_document`."""
        return self.register_document(
            document.to_json(),
            signature,
            product_group=product_group,
            document_type=document_type,
        )

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> CrptApi:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
