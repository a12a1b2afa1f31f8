"""Base utilities for Okto MCP tools.

Every tool returns plain text. Failures are logged and converted to a
user-facing message so that no exception ever reaches the transport.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from pydantic import ValidationError

logger = logging.getLogger(__name__)

AUTH_HINT = "Please ensure you are authenticated."


def format_validation_error(error: ValidationError) -> str:
    """Render a pydantic validation error as one line per field."""
    lines = ["Invalid parameters:"]
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "input"
        lines.append(f"  {field}: {item['msg']}")
    return "\n".join(lines)


async def run_tool(
    tool_name: str,
    operation: Callable[[], str],
    failure_message: str,
) -> str:
    """Execute a tool operation with timing and error conversion.

    Args:
        tool_name: Name of the tool being executed (for logs).
        operation: Callable producing the success text.
        failure_message: Text returned if the operation raises.

    Returns:
        The operation's text, or ``failure_message`` on any error.
    """
    start_time = time.perf_counter()
    try:
        result = operation()
    except Exception as e:
        logger.error("Error in %s: %s", tool_name, e)
        return failure_message
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug("Tool %s finished in %.1fms", tool_name, duration_ms)
    return result
