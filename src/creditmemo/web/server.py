"""
creditmemo.web.server
~~~~~~~~~~~~~~~~~~~~~
Uvicorn launcher for the credit memo API.

    creditmemo-server
    creditmemo-server --port 8080 --log-level debug
    python -m creditmemo.web.server --reload
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from ..config import cfg

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


def launch(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Start the credit memo API server.

    Args:
        host:      Bind address (default 127.0.0.1).
        port:      TCP port (default 8080).
        reload:    Enable uvicorn hot-reload (dev mode only).
        log_level: Uvicorn log level.
    """
    url = f"http://{host}:{port}"
    logger.info("creditmemo API  →  %s%s/credit-memos", url, cfg.api_prefix)
    logger.info("API docs        →  %s/docs", url)
    logger.info("Model           →  %s @ %s", cfg.model, cfg.ollama_base_url)

    uvicorn.run(
        "creditmemo.web.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Start the credit memo API server.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--host",       default=DEFAULT_HOST,
                   help="Bind address.")
    p.add_argument("--port", "-p", default=DEFAULT_PORT, type=int,
                   help="TCP port.")
    p.add_argument("--reload",     action="store_true",
                   help="Enable hot-reload (development mode).")
    p.add_argument("--log-level",  default=cfg.log_level,
                   choices=["debug", "info", "warning", "error"],
                   help="Log level for the application and uvicorn.")
    return p


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s  %(name)s: %(message)s",
    )
    launch(
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
