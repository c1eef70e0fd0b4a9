"""Document submission to the registry."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from CrptClient.errors import DocumentRegistrationFailure
from CrptClient.models import (
    APPLICATION_JSON,
    DocumentType,
    RegistrationRequest,
    RegistrationResult,
)
from CrptClient.protocols import EndpointProvider, TextEncoder
from CrptClient.ratelimit import RateLimiter

LOGGER = logging.getLogger(__name__)


class DocumentRegistrar:
    """Build and submit document registration requests.

    The registrar holds no token; callers pass one per :meth:`register` call.
    """

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        encoder: TextEncoder,
        endpoints: EndpointProvider,
        rate_limiter: RateLimiter,
        document_format: str = "MANUAL",
    ) -> None:
        self._http = http_client
        self._encoder = encoder
        self._endpoints = endpoints
        self._limiter = rate_limiter
        self._document_format = document_format

    def build_request(
        self,
        document_payload: str,
        signature: str,
        *,
        product_group: Optional[str] = None,
        document_type: DocumentType = DocumentType.LP_INTRODUCE_GOODS,
    ) -> RegistrationRequest:
        """Encode payload and signature into a request body."""
        return RegistrationRequest(
            document_format=self._document_format,
            product_document=self._encoder.encode(document_payload),
            product_group=product_group,
            signature=self._encoder.encode(signature),
            type=document_type,
        )

    def register(
        self,
        document_payload: str,
        signature: str,
        token: str,
        *,
        product_group: Optional[str] = None,
        document_type: DocumentType = DocumentType.LP_INTRODUCE_GOODS,
    ) -> str:
        """Submit a document and return the registry identifier.

        Args:
            document_payload: Document already serialized to its canonical JSON text.
            signature: Detached signature of the document.
            token: Registry token, sent as a bearer credential.
            product_group: Optional product group; appended as ``?pg=`` and
                included in the body when set.
            document_type: Registry document type tag.

        Raises:
            DocumentRegistrationFailure: Transport, HTTP status or response
                parsing failed. Not retried.
        """
        request = self.build_request(
            document_payload,
            signature,
            product_group=product_group,
            document_type=document_type,
        )
        url = self._endpoints.create_document_url(product_group)
        status: int | None = None

        try:
            self._limiter.acquire()
            response = self._http.post(
                url,
                content=request.to_json(),
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": APPLICATION_JSON,
                },
            )
            status = response.status_code
            response.raise_for_status()
            result = RegistrationResult.model_validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as exc:
            LOGGER.error(
                "Document registration failed",
                extra={
                    "url": url,
                    "status": status,
                    "document_type": document_type.value,
                    "error": str(exc),
                },
            )
            raise DocumentRegistrationFailure(
                f"Document registration failed: {exc}",
                url=url,
                status_code=status,
                details={"document_type": document_type.value},
            ) from exc

        LOGGER.info(
            "Document registered",
            extra={
                "registry_id": result.value,
                "document_type": document_type.value,
                "product_group": product_group,
            },
        )
        return result.value
