"""Entry point for Okto MCP Server.

Usage:
    okto-mcp          Refresh credentials if needed, then serve MCP on stdio
    okto-mcp auth     Force browser re-authentication and exit
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from okto_mcp.auth.orchestrator import AuthOrchestrator
from okto_mcp.auth.storage import CredentialStore
from okto_mcp.config import load_settings
from okto_mcp.context import AppContext
from okto_mcp.utils.errors import OktoMCPError

AUTH_COMMAND = "auth"


def configure_logging() -> None:
    """Configure logging to stderr (STDIO-safe).

    Sends all logs to stderr so they don't interfere with MCP's
    STDIO transport which uses stdout for JSON-RPC messages.

    Respects LOG_LEVEL env var (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = logging.getLevelNamesMapping().get(log_level_str, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    # Reduce noise from HTTP and Google libraries
    logging.getLogger("google.auth").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Loads environment, runs startup authentication, and either exits
    (``auth`` command) or starts the MCP server on stdio.

    Args:
        argv: Command-line arguments without the program name.
            Defaults to ``sys.argv[1:]``.
    """
    load_dotenv()

    configure_logging()
    logger = logging.getLogger(__name__)

    args = sys.argv[1:] if argv is None else argv
    manual = bool(args) and args[0] == AUTH_COMMAND

    try:
        settings = load_settings()
        context = AppContext.from_settings(settings)
        store = CredentialStore.from_settings(settings)
        orchestrator = AuthOrchestrator(
            store,
            context.okto,
            timeout=settings.oauth_timeout_seconds,
        )
        context.auth_session = orchestrator.run_startup(manual=manual)
    except OktoMCPError as e:
        logger.error("Startup failed: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.exception("Fatal error during startup: %s", e)
        sys.exit(1)

    if manual:
        logger.info("Authentication complete. Credentials saved to %s", store.credentials_path)
        return

    # Import server after startup authentication succeeded
    from okto_mcp.server import create_server

    mcp = create_server(context)
    logger.info("Starting Okto MCP Server with STDIO transport")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
