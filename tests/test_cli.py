"""Typer CLI tests with the registry replaced by the in-memory fake."""

from __future__ import annotations

import json
import shlex
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from CrptClient.cli import app
from tests.fixtures.registry_mocking import CHALLENGE_PATH, CREATE_PATH, request_json

runner = CliRunner()

SIGNER_CMD = f"{shlex.quote(sys.executable)} -c \"print('SIG')\""

DOCUMENT = {
    "doc_id": "doc-1",
    "doc_status": "DRAFT",
    "doc_type": "LP_INTRODUCE_GOODS",
    "participant_inn": "7700000000",
    "producer_inn": "7700000001",
    "production_date": "2024-03-01",
    "production_type": "OWN_PRODUCTION",
    "reg_date": "2024-03-02",
}


@pytest.fixture
def cli_registry(fake_registry, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(
        "CrptClient.client.build_http_client",
        lambda *args, **kwargs: fake_registry.client(),
    )
    return fake_registry


@pytest.fixture
def document_files(tmp_path: Path) -> tuple[Path, Path]:
    document = tmp_path / "document.json"
    document.write_text(json.dumps(DOCUMENT), encoding="utf-8")
    signature = tmp_path / "document.sig"
    signature.write_text("detached-signature\n", encoding="utf-8")
    return document, signature


def test_register_prints_registry_id(cli_registry, document_files) -> None:
    document, signature = document_files

    result = runner.invoke(
        app,
        [
            "register",
            str(document),
            "--signature-file",
            str(signature),
            "--signer-cmd",
            SIGNER_CMD,
            "--product-group",
            "milk",
            "--rate",
            "10/second",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "DOC-123" in result.output
    (submission,) = cli_registry.calls(CREATE_PATH)
    assert submission.headers["Authorization"] == "Bearer T1"
    assert request_json(submission)["product_group"] == "milk"


def test_register_reports_auth_failure(cli_registry, document_files) -> None:
    document, signature = document_files
    cli_registry.fail_next(CHALLENGE_PATH, 503)

    result = runner.invoke(
        app,
        [
            "register",
            str(document),
            "--signature-file",
            str(signature),
            "--signer-cmd",
            SIGNER_CMD,
        ],
    )

    assert result.exit_code == 1
    assert "authentication challenge" in result.output
    assert cli_registry.count(CREATE_PATH) == 0


def test_register_rejects_invalid_rate(cli_registry, document_files) -> None:
    document, signature = document_files

    result = runner.invoke(
        app,
        [
            "register",
            str(document),
            "--signature-file",
            str(signature),
            "--signer-cmd",
            SIGNER_CMD,
            "--rate",
            "0/second",
        ],
    )

    assert result.exit_code == 1
    assert "Invalid client configuration" in result.output
    assert cli_registry.requests == []


def test_register_rejects_invalid_document(cli_registry, tmp_path: Path) -> None:
    document = tmp_path / "document.json"
    document.write_text(json.dumps({"doc_id": "only"}), encoding="utf-8")
    signature = tmp_path / "document.sig"
    signature.write_text("sig", encoding="utf-8")

    result = runner.invoke(
        app,
        ["register", str(document), "-s", str(signature), "--signer-cmd", SIGNER_CMD],
    )

    assert result.exit_code == 1
    assert cli_registry.requests == []


@pytest.mark.parametrize("signer_cmd", ["", "cryptcp 'unbalanced"])
def test_register_rejects_unusable_signer_command(
    cli_registry, document_files, signer_cmd: str
) -> None:
    document, signature = document_files

    result = runner.invoke(
        app,
        ["register", str(document), "-s", str(signature), "--signer-cmd", signer_cmd],
    )

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Error" in result.output
    assert cli_registry.requests == []


def test_validate_config(tmp_path: Path) -> None:
    good = tmp_path / "good.yaml"
    good.write_text("rate_limit:\n  permits: 3\n", encoding="utf-8")
    bad = tmp_path / "bad.yaml"
    bad.write_text("rate_limit:\n  permits: 0\n", encoding="utf-8")

    assert runner.invoke(app, ["validate-config", str(good)]).exit_code == 0
    assert runner.invoke(app, ["validate-config", str(bad)]).exit_code == 1


def test_config_schema_to_file(tmp_path: Path) -> None:
    output = tmp_path / "schema.json"

    result = runner.invoke(app, ["config-schema", "--output", str(output)])

    assert result.exit_code == 0
    assert json.loads(output.read_text())["title"] == "ClientConfig"
