from __future__ import annotations

import json

import typer
import uvicorn

from casesheets.config import CASES_SHEET, settings
from casesheets.sheets import a1_range, build_sheets_client
from casesheets.tables import locate_header_row, project_case_table

cli = typer.Typer(help="Case Sheets CLI")


@cli.command()
def version() -> None:
    """Print runtime version."""
    typer.echo(f"{settings.app.name} {settings.app.version}")


@cli.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host to bind"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload for local development"),
) -> None:
    """Run the API server."""
    uvicorn.run(
        "casesheets.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@cli.command()
def inspect() -> None:
    """Read the cases tab and report where the header row was found."""
    client = build_sheets_client(settings)
    grid = client.read(a1_range(CASES_SHEET, "A:ZZ"))
    header = locate_header_row(grid)
    table = project_case_table(grid)
    typer.echo(
        json.dumps(
            {
                "rows_read": len(grid),
                "header_row": header.sheet_row if header else None,
                "headers": table.headers,
                "cases": len(table.cases),
            },
            ensure_ascii=False,
            indent=2,
        )
    )


if __name__ == "__main__":
    cli()
