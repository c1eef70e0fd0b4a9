"""Signer that delegates to an external signing command.

The command receives the data to sign on stdin and must print the signature
to stdout, e.g. a wrapper around a CryptoPro ``cryptcp`` invocation.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Sequence, Union

from CrptClient.errors import SigningFailure

LOGGER = logging.getLogger(__name__)


class CommandSigner:
    """Sign data by piping it through an external command."""

    def __init__(self, command: Union[str, Sequence[str]], *, timeout_s: float = 60.0) -> None:
        self.argv = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.argv:
            raise ValueError("Signing command must not be empty")
        self.timeout_s = timeout_s

    def sign(self, data: str) -> str:
        try:
            completed = subprocess.run(
                self.argv,
                input=data,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise SigningFailure(f"Cannot run signing command {self.argv[0]!r}: {exc}") from exc

        if completed.returncode != 0:
            LOGGER.error(
                "Signing command failed",
                extra={"command": self.argv[0], "returncode": completed.returncode},
            )
            raise SigningFailure(
                f"Signing command exited with status {completed.returncode}",
                details={"stderr": completed.stderr.strip()},
            )

        signature = completed.stdout.strip()
        if not signature:
            raise SigningFailure("Signing command produced no output")
        return signature
