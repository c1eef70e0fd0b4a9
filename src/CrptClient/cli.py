"""Typer-based CLI for CrptClient with Pydantic v2 configuration."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from CrptClient.client import CrptApi
from CrptClient.config import export_config_schema, load_config, validate_config_file
from CrptClient.errors import RegistryError, describe_failure
from CrptClient.models import DocumentData, DocumentType
from CrptClient.ratelimit import RateBudget
from CrptClient.signers import CommandSigner

console = Console()
app = typer.Typer(help="Register documents with the product-traceability registry")

# ============================================================================
# Setup
# ============================================================================


def _setup_logging(verbose: bool) -> None:
    """Setup logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _report_failure(error: BaseException) -> None:
    message, suggestion = describe_failure(error)
    console.print(f"[red]✗ {message}[/red]")
    if suggestion:
        console.print(f"[yellow]  {suggestion}[/yellow]")


# ============================================================================
# Commands
# ============================================================================


@app.command()
def register(
    document: Path = typer.Argument(..., help="Path to the document JSON"),
    signature_file: Path = typer.Option(
        ..., "--signature-file", "-s", help="Detached signature of the document"
    ),
    signer_cmd: str = typer.Option(
        ...,
        "--signer-cmd",
        help="Command that signs stdin and prints the signature",
        envvar="CRPT_SIGNER_CMD",
    ),
    product_group: Optional[str] = typer.Option(
        None, "--product-group", "-g", help="Product group, e.g. 'milk'"
    ),
    document_type: DocumentType = typer.Option(
        DocumentType.LP_INTRODUCE_GOODS, "--document-type", "-t", help="Document type"
    ),
    rate: Optional[str] = typer.Option(
        None, "--rate", help="Request budget, e.g. '10/second' (overrides config)"
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
        envvar="CRPT_CONFIG",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose"),
) -> None:
    """Register a document and print the registry identifier."""
    _setup_logging(verbose)

    try:
        cfg = load_config(path=config)
        budget = RateBudget.parse(rate) if rate else cfg.rate_limit.to_budget()
        data = DocumentData.model_validate_json(document.read_text(encoding="utf-8"))
        signature = signature_file.read_text(encoding="utf-8").strip()

        with CrptApi(budget, CommandSigner(signer_cmd), config=cfg) as api:
            registry_id = api.create_document(
                data,
                signature,
                product_group=product_group,
                document_type=document_type,
            )
    except RegistryError as e:
        _report_failure(e)
        if verbose:
            raise
        raise typer.Exit(code=1)
    except (OSError, ValueError) as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(code=1)

    typer.echo(registry_id)


@app.command()
def validate_config(
    config: str = typer.Argument(..., help="Path to config file"),
) -> None:
    """Validate a config file."""
    try:
        validate_config_file(config)
        console.print("[green]✓ Config valid[/green]")
    except RegistryError as e:
        console.print(f"[red]✗ Invalid: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def config_schema(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save schema to file"),
) -> None:
    """Export JSON Schema for ClientConfig."""
    schema_data = export_config_schema()

    if output:
        output.write_text(json.dumps(schema_data, indent=2))
        console.print(f"[green]✓ Schema written to {output}[/green]")
    else:
        console.print(Panel(json.dumps(schema_data, indent=2), title="JSON Schema", expand=False))


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
