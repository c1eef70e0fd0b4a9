"""Capability abstractions consumed by the client, with production variants.

- :class:`Signer`: opaque signature function supplied by the caller.
- :class:`TextEncoder`: reversible textual transport encoding
  (:class:`Base64TextEncoder` in production).
- :class:`EndpointProvider`: registry URLs (:class:`RegistryEndpoints`
  in production, built from :class:`~CrptClient.config.EndpointsConfig`).
"""

from __future__ import annotations

import base64
from typing import Optional, Protocol, runtime_checkable

import httpx

from CrptClient.config.models import EndpointsConfig


@runtime_checkable
class Signer(Protocol):
    """Produce an attached signature for ``data`` with the participant's key."""

    def sign(self, data: str) -> str: ...


class TextEncoder(Protocol):
    def encode(self, data: str) -> str: ...

    def decode(self, encoded: str) -> str: ...


class EndpointProvider(Protocol):
    def auth_challenge_url(self) -> str: ...

    def token_url(self) -> str: ...

    def create_document_url(self, product_group: Optional[str]) -> str: ...


class Base64TextEncoder:
    """Standard Base64 over UTF-8 bytes."""

    def encode(self, data: str) -> str:
        return base64.b64encode(data.encode("utf-8")).decode("ascii")

    def decode(self, encoded: str) -> str:
        return base64.b64decode(encoded.encode("ascii"), validate=True).decode("utf-8")


class RegistryEndpoints:
    """Endpoint provider backed by static configuration."""

    def __init__(self, config: Optional[EndpointsConfig] = None) -> None:
        self._config = config or EndpointsConfig()

    def auth_challenge_url(self) -> str:
        return self._config.auth_challenge_url

    def token_url(self) -> str:
        return self._config.token_url

    def create_document_url(self, product_group: Optional[str]) -> str:
        url = self._config.create_document_url
        if product_group is None:
            return url
        return str(httpx.URL(url).copy_merge_params({"pg": product_group}))
