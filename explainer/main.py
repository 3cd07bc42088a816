"""
Main application entry point for the explainer.

Provides a CLI for recovering structured answers and solving questions.
"""

import json
import sys
from typing import Optional

import click
from rich.console import Console

from explainer.clients.llm_client import LLMClient
from explainer.core.config import (
    EXTRACTION_STRATEGIES,
    get_settings,
    print_configuration_summary,
    validate_required_settings,
)
from explainer.core.exceptions import ConfigurationError, ExplainerError
from explainer.core.logging import set_correlation_id, setup_logging
from explainer.core.models import RecoveryOutcome
from explainer.recovery.pipeline import RecoveryPipeline
from explainer.services.solve_service import SolveService

console = Console(stderr=True)


def _emit(outcome: RecoveryOutcome) -> None:
    click.echo(json.dumps(outcome.record, ensure_ascii=False, indent=2))
    if outcome.fallback_used:
        console.print("[yellow]Recovery failed; fallback record emitted[/yellow]")
    else:
        console.print(f"[green]Recovered[/green] ({outcome.confidence.value})")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines instead of rich output")
@click.option("--correlation-id", help="Set correlation ID for request tracing")
@click.pass_context
def main(ctx, debug: bool, json_logs: bool, correlation_id: Optional[str]):
    """Turn model output for exam questions into structured explanations."""
    ctx.ensure_object(dict)

    setup_logging(debug=debug, rich_output=not json_logs)
    set_correlation_id(correlation_id)

    ctx.obj["debug"] = debug


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--no-repair", is_flag=True, help="Skip the secondary repair model call")
@click.option(
    "--extraction",
    type=click.Choice(EXTRACTION_STRATEGIES),
    default=None,
    help="Override RECOVERY_EXTRACTION",
)
def recover(source, no_repair: bool, extraction: Optional[str]):
    """Recover a structured answer from raw model output (file or stdin)."""
    settings = get_settings()
    raw = source.read()

    client = None
    if not no_repair and settings.recovery.secondary_repair:
        missing = validate_required_settings("recover")
        if missing:
            console.print(
                f"[yellow]Secondary repair disabled, missing:[/yellow] {', '.join(missing)}"
            )
        else:
            client = LLMClient(settings.llm)

    pipeline = RecoveryPipeline.from_settings(settings, client)
    if extraction:
        pipeline.extraction = extraction
    _emit(pipeline.run(raw))


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--question", help="Question text; overrides SOURCE")
@click.pass_context
def solve(ctx, source, question: Optional[str]):
    """Ask the model to explain a question (OCR text from file or stdin)."""
    try:
        missing = validate_required_settings("solve")
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

        settings = get_settings()
        service = SolveService(LLMClient(settings.llm), settings=settings)
        _emit(service.solve(question if question is not None else source.read()))
    except ExplainerError as e:
        console.print(f"[red]Solve Error:[/red] {e.message}")
        if ctx.obj.get("debug") and e.details:
            console.print(e.details)
        sys.exit(1)


@main.command()
def config():
    """Show the effective configuration."""
    print_configuration_summary(console)


if __name__ == "__main__":
    main()
