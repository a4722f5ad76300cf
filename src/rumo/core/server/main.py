"""Run the Rumo daily-state server over Streamable HTTP.

Started via the ``rumo-server`` script or ``python -m rumo.core.server.main``.
"""

from __future__ import annotations

import logging
from ipaddress import ip_address

from rumo.core.config.settings import get_settings
from rumo.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the Rumo MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.rumo_log_level.upper(), logging.INFO))

    logger = logging.getLogger(__name__)
    if not settings.rumo_allow_insecure_bind and not _is_loopback_host(settings.rumo_host):
        # Sessions are process-wide: any client that can reach the port acts
        # as the signed-in user.
        raise RuntimeError(
            f"Refusing to expose Rumo on {settings.rumo_host!r}: the signed-in session "
            "is shared by every client. Set RUMO_ALLOW_INSECURE_BIND=true to override."
        )

    logger.info(
        "Starting Rumo on %s:%d (profiles %s%s)",
        settings.rumo_host,
        settings.rumo_port,
        "persisted" if settings.encryption_key else "in memory only",
        ", dev user bound" if settings.dev_user_id else "",
    )

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.rumo_host,
        port=settings.rumo_port,
    )


if __name__ == "__main__":
    run()
