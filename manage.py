import json
from pathlib import Path
import subprocess
from typing import Annotated, Optional

from rich import print
from rich.table import Table
import typer

from paysim.core.config import settings
from paysim.core.services import tokens as token_services

app = typer.Typer()


def describe_behavior(behavior) -> str:
    """One-line summary of what a magic token does to a charge."""
    if behavior.precharge is not None:
        return f"fails the request ({behavior.precharge.kind})"
    outcome = behavior.outcome
    if outcome is None:
        return "succeeds" if behavior.persist else "succeeds, charge not stored"
    if isinstance(outcome, token_services.Decline):
        detail = outcome.decline_code or outcome.failure_code
        return f"declined ({detail})"
    if isinstance(outcome, token_services.ManualReview):
        return "succeeds, placed in manual review"
    if isinstance(outcome, token_services.DelayedDispute):
        label = "chargeback" if outcome.chargeback else "inquiry"
        return f"succeeds, then disputed ({outcome.reason}, {label})"
    return type(outcome).__name__


@app.command()
def runserver(
    port: Annotated[int, typer.Option(help="Port to listen on")] = 8000,
):
    try:
        server_command = (
            f"uvicorn paysim.main:app --host 127.0.0.1 --port {port} --reload"
            if settings.DEBUG
            else f"uvicorn paysim.main:app --host 0.0.0.0 --port {port}"
        )
        print(f"Running paysim server: {server_command}")
        subprocess.run(server_command, shell=True, check=True)
    except subprocess.CalledProcessError as e:
        print(f"[red]Error:[/red] {e}")
        raise


@app.command()
def generateopenapi(
    output: Annotated[Path, typer.Option(help="Where to write the schema")] = Path(
        "openapi.json"
    ),
):
    """
    Generates the OpenAPI schema of the simulator and saves it to a JSON file.
    """
    from paysim.main import app as fastapi_app

    with output.open("w", encoding="utf-8") as f:
        json.dump(fastapi_app.openapi(), f, ensure_ascii=False, indent=2)
    print(f"[green]OpenAPI schema generated at {output.name}[/green]")


@app.command()
def tokens(
    brand: Annotated[
        Optional[str], typer.Option("--brand", "-b", help="Only cards of this brand")
    ] = None,
):
    """
    List the magic card tokens the simulator understands.

    Examples:
        python manage.py tokens
        python manage.py tokens --brand Visa
    """
    from paysim.core.services.tokens import TOKEN_BEHAVIORS

    table = Table(title="Magic tokens")
    table.add_column("Token", style="cyan")
    table.add_column("Card")
    table.add_column("Behaviour")

    shown = 0
    for token, behavior in TOKEN_BEHAVIORS.items():
        card = behavior.card
        if brand and (card is None or card.brand.lower() != brand.lower()):
            continue
        card_label = f"{card.brand} ****{card.last4}" if card else "-"
        table.add_row(token, card_label, describe_behavior(behavior))
        shown += 1

    if not shown:
        print(f"[yellow]No tokens match brand '{brand}'[/yellow]")
        raise typer.Exit(1)
    print(table)


@app.callback()
def main(ctx: typer.Context):
    print(f"Executing the command: {ctx.invoked_subcommand}")


if __name__ == "__main__":
    app()
