"""Launch the demo icon catalog website.

Usage:
    python -m panelscrape.demo.run_demo --port 8080
"""

from __future__ import annotations

import click


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8080, show_default=True, type=click.IntRange(1, 65535))
@click.option(
    "--log-level",
    default="info",
    show_default=True,
    type=click.Choice(["critical", "error", "warning", "info", "debug"]),
)
def main(host: str, port: int, log_level: str) -> None:
    """Serve the demo icon catalog until interrupted.

    Catalogs point at http://127.0.0.1:8080/ by default; pass ``?delay=MS``
    in the page URL to slow down the detail panel.
    """
    import uvicorn

    from panelscrape.demo.app import app

    click.echo(f"Demo icon catalog at http://{host}:{port}/ (Ctrl+C to stop)")
    uvicorn.run(app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    main()
