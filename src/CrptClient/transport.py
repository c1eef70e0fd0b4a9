"""HTTPX client factory for registry calls.

Responsibilities
----------------
- Construct an :class:`httpx.Client` configured with timeout budgets,
  connection pooling limits, a Certifi-backed SSL context and the client's
  ``User-Agent``.
- Allow callers to inject custom transports (e.g., :class:`httpx.MockTransport`)
  and extra event hooks for tests.
- Annotate each request/response with elapsed time and log responses at DEBUG.

Design Notes
------------
- The factory keeps no module-level client; every :class:`~CrptClient.client.CrptApi`
  owns the client it builds.
- Transport retries are disabled (``retries=0``): failures surface to the caller
  immediately.
"""

from __future__ import annotations

import logging
import ssl
import time
from typing import Dict, Iterable, Mapping, MutableMapping, Optional

import certifi
import httpx

from CrptClient.config.models import HttpConfig

LOGGER = logging.getLogger("CrptClient.network")


def _build_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.load_verify_locations(certifi.where())
    return context


def _request_hook(request: httpx.Request) -> None:
    meta: MutableMapping[str, object] = request.extensions.setdefault("crpt_network_meta", {})  # type: ignore[assignment]
    meta["start_time"] = time.perf_counter()


def _response_hook(response: httpx.Response) -> None:
    meta: MutableMapping[str, object] = response.request.extensions.setdefault(  # type: ignore[assignment]
        "crpt_network_meta", {}
    )
    start_time = meta.get("start_time")
    if isinstance(start_time, (int, float)):
        meta["elapsed"] = time.perf_counter() - start_time
    LOGGER.debug(
        "httpx-response",
        extra={
            "method": response.request.method,
            "url": str(response.request.url),
            "status": response.status_code,
            "elapsed_ms": int(float(meta.get("elapsed", 0.0)) * 1000),  # type: ignore[arg-type]
        },
    )


def _build_event_hooks(extra_hooks: Optional[Mapping[str, Iterable]]) -> Dict[str, list]:
    hooks: Dict[str, list] = {
        "request": [_request_hook],
        "response": [_response_hook],
    }
    if extra_hooks:
        for name, values in extra_hooks.items():
            if not values:
                continue
            target = hooks.setdefault(name, [])
            target.extend(values)
    return hooks


def build_http_client(
    config: Optional[HttpConfig] = None,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    event_hooks: Optional[Mapping[str, Iterable]] = None,
) -> httpx.Client:
    """Return a new HTTPX client for registry calls."""

    config = config or HttpConfig()
    timeout = httpx.Timeout(
        connect=config.connect_timeout_s,
        read=config.read_timeout_s,
        write=config.write_timeout_s,
        pool=config.pool_timeout_s,
    )
    limits = httpx.Limits(
        max_connections=config.max_connections,
        max_keepalive_connections=max(1, config.max_connections // 4),
        keepalive_expiry=15.0,
    )

    verify: ssl.SSLContext | bool = _build_ssl_context() if config.verify_tls else False

    return httpx.Client(
        transport=transport or httpx.HTTPTransport(retries=0, verify=verify, limits=limits),
        timeout=timeout,
        limits=limits,
        verify=verify,
        headers={"User-Agent": config.user_agent},
        event_hooks=_build_event_hooks(event_hooks),
    )
