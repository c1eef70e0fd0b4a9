"""
Pytest Configuration

Shared fixtures for the suite are defined in ``tests.fixtures`` and re-exported
here so every test module can request them by name.
"""

from __future__ import annotations

import pytest

from tests.fixtures.registry_mocking import (  # noqa: F401
    fake_clock,
    fake_registry,
    registry_client,
    signer,
)


@pytest.fixture(autouse=True)
def _isolate_crpt_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer CRPT_* variables from leaking into config loading."""
    import os

    for key in list(os.environ):
        if key.startswith("CRPT_"):
            monkeypatch.delenv(key, raising=False)
