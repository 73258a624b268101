"""CLI interface."""
from __future__ import annotations

import asyncio
from typing import List, Optional

import typer

from masterplan.db import Base, SessionLocal, engine
from masterplan.errors import NotFoundError
from masterplan.services.explorer_service import get_explorer_page, list_routes, render_level_diagram
from masterplan.services.repository import SqlRepository
from masterplan.utils.file_utils import save_svg

app = typer.Typer(add_completion=False)


@app.command()
def routes():
    """Print every pre-renderable explorer route."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for route in list_routes(SqlRepository(db)):
            typer.echo(route)
    finally:
        db.close()


@app.command()
def render(
    project: str = typer.Argument(..., help="Project slug."),
    path: Optional[List[str]] = typer.Argument(None, help="Layer slugs from the root."),
    output_name: str = typer.Option("diagram", "--output-name"),
):
    """Render one level's interactive diagram to an SVG file."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        page = get_explorer_page(SqlRepository(db), project, path or [])
    except NotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    finally:
        db.close()
    svg = asyncio.run(render_level_diagram(page))
    typer.echo(save_svg(output_name, svg))


if __name__ == "__main__":
    app()
