"""Configuration models and loader for CrptClient."""

from .loader import export_config_schema, load_config, validate_config_file
from .models import (
    ClientConfig,
    EndpointsConfig,
    HttpConfig,
    RateLimitPolicy,
)

__all__ = [
    "ClientConfig",
    "EndpointsConfig",
    "HttpConfig",
    "RateLimitPolicy",
    "export_config_schema",
    "load_config",
    "validate_config_file",
]
