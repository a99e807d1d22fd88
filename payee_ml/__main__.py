"""Command line interface for payee classification."""

import asyncio
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from payee_ml.config import configure_logging, get_settings
from payee_ml.data_models import PayeeType
from payee_ml.exceptions import PayeeMLError
from payee_ml.export import compute_statistics, row_results_from_classifications
from payee_ml.inference import BatchClassifier, create_classifier
from payee_ml.inference.classification import is_derived

app = typer.Typer(
    name="payee-ml",
    help="Classify payee names as Business or Individual.",
    no_args_is_help=True,
)
console = Console()

_COLORS = {PayeeType.BUSINESS: "cyan", PayeeType.INDIVIDUAL: "magenta"}


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override PAYEE_ML_LOG_LEVEL"),
) -> None:
    configure_logging(log_level)


@app.command()
def classify(
    names: list[str] = typer.Argument(..., help="Payee names to classify"),
    offline: bool = typer.Option(False, "--offline", help="Never call the AI tier"),
    bypass_rules: bool = typer.Option(
        False, "--bypass-rules", help="Skip the structural tier"
    ),
) -> None:
    """Classify one or more payee names."""
    settings = get_settings()
    classifier = create_classifier(settings)
    config = classifier.default_config.with_overrides(
        offline_mode=offline, bypass_rule_tiers=bypass_rules
    )

    async def run() -> None:
        for name in names:
            result = await classifier.classify(name, config)
            color = _COLORS[result.classification]
            console.print(
                f"{name}: [{color}]{result.classification.value}[/{color}] "
                f"({result.confidence}%) [dim]{result.tier.value}[/dim]"
            )
            console.print(f"  [dim]{result.reasoning}[/dim]")
            exclusion = result.keyword_exclusion
            if exclusion and exclusion.is_excluded:
                console.print(
                    "  [yellow]Keyword exclusion: "
                    f"{', '.join(exclusion.matched_keywords)}[/yellow]"
                )

    asyncio.run(run())


@app.command("classify-file")
def classify_file(
    path: Path = typer.Argument(..., help="Text file with one payee name per line"),
    offline: bool = typer.Option(False, "--offline", help="Never call the AI tier"),
    no_dedup: bool = typer.Option(False, "--no-dedup", help="Classify every row"),
    limit: int = typer.Option(50, "--limit", "-n", help="Rows shown in the table"),
) -> None:
    """Classify every line of a file and print a summary."""
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)

    names = [line.strip() for line in path.read_text(encoding="utf-8").splitlines()]
    names = [name for name in names if name]
    if not names:
        console.print("[yellow]No payee names in file[/yellow]")
        raise typer.Exit(0)

    settings = get_settings()
    classifier = create_classifier(settings)
    config = classifier.default_config.with_overrides(
        offline_mode=offline, dedup_enabled=not no_dedup
    )
    console.print(f"[bold]Classifying {len(names)} names[/bold] from {path}\n")

    start = time.perf_counter()
    try:
        classifications = asyncio.run(
            BatchClassifier(classifier).classify_batch(names, config)
        )
    except PayeeMLError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1) from e
    elapsed_ms = int((time.perf_counter() - start) * 1000)

    table = Table(title="Classification Results")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Payee", max_width=40)
    table.add_column("Classification")
    table.add_column("Conf.", justify="right")
    table.add_column("Tier", style="dim")
    for c in classifications[:limit]:
        color = _COLORS[c.result.classification]
        table.add_row(
            str(c.row_index + 1),
            c.payee_name,
            f"[{color}]{c.result.classification.value}[/{color}]",
            f"{c.result.confidence}%",
            c.result.tier.value,
        )
    console.print(table)
    if len(classifications) > limit:
        console.print(f"[dim]... {len(classifications) - limit} more rows[/dim]")

    stats = compute_statistics(
        row_results_from_classifications(classifications),
        distinct_names=sum(1 for c in classifications if not is_derived(c.result)),
        processing_time_ms=elapsed_ms,
    )
    console.print()
    console.print(
        f"[bold]Business:[/bold] {stats.business}  "
        f"[bold]Individual:[/bold] {stats.individual}  "
        f"[bold]Avg. confidence:[/bold] {stats.average_confidence:.1f}%"
    )
    console.print(f"Tiers: {stats.by_tier}")
    console.print(f"Confidence: {stats.by_confidence}")
    if stats.keyword_excluded:
        console.print(f"[yellow]Keyword exclusions: {stats.keyword_excluded}[/yellow]")
    console.print(
        f"[dim]{stats.dedup_savings} duplicate rows skipped, {elapsed_ms}ms[/dim]"
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("payee_ml.api.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
