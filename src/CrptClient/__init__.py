"""Public API for the CrptClient registry client.

Rate-limited, token-caching client for registering signed documents with the
product-traceability registry. Most callers only need :class:`CrptApi`,
:class:`RateBudget` and a :class:`Signer` implementation.
"""

from __future__ import annotations

from .client import CrptApi
from .config import ClientConfig, load_config
from .errors import (
    AuthChallengeFailure,
    AuthFailure,
    DocumentRegistrationFailure,
    InvalidConfiguration,
    RegistryError,
    SigningFailure,
    TokenExchangeFailure,
)
from .models import Description, DocumentData, DocumentType, Product
from .protocols import Signer
from .ratelimit import RateBudget, RateLimiter

__version__ = "1.0.0"

__all__ = [
    "AuthChallengeFailure",
    "AuthFailure",
    "ClientConfig",
    "CrptApi",
    "Description",
    "DocumentData",
    "DocumentRegistrationFailure",
    "DocumentType",
    "InvalidConfiguration",
    "Product",
    "RateBudget",
    "RateLimiter",
    "RegistryError",
    "Signer",
    "SigningFailure",
    "TokenExchangeFailure",
    "__version__",
    "load_config",
]
