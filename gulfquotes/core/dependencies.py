"""Shared FastAPI dependency helpers."""

from typing import Any

from fastapi import Request

from gulfquotes.core.errors import ServiceUnavailableError


def service_from_state(request: Request, name: str) -> Any:
    """Return ``request.app.state.<name>`` or fail with 503.

    Services are attached to ``app.state`` during the lifespan; they are
    missing when the database was unreachable at startup.
    """
    service = getattr(request.app.state, name, None)
    if service is None:
        raise ServiceUnavailableError(f"{name} not available")
    return service
