"""
Pytest fixtures for the CrptClient test suite.

- registry_mocking: in-memory registry (httpx.MockTransport), fake clock and
  signer doubles
"""
