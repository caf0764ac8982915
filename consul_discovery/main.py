"""Entry point: ``consul-discovery --server`` runs the app, anything else the CLI."""

from __future__ import annotations

import sys
from typing import NoReturn


def run_fastapi_server(host: str | None = None, port: int | None = None) -> NoReturn:
    """Serve ``create_app`` with uvicorn, using APP_* settings for defaults."""
    import uvicorn

    from consul_discovery.core.settings import get_app_settings, get_logging_settings

    settings = get_app_settings()
    log_settings = get_logging_settings()

    uvicorn.run(
        "consul_discovery.app.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.debug,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )
    sys.exit(0)


def main() -> None:
    """Route to the server when ``--server`` is given, otherwise to the CLI."""
    if "--server" in sys.argv:
        sys.argv.remove("--server")
        run_fastapi_server()

    from consul_discovery.cli.main import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
