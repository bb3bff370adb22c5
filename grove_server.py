"""Grove backend server.

Mounts the Grove item-index router under a FastAPI application so a
presentation layer (desktop viewer or web front end) can drive the
tree over HTTP. The router is imported lazily so that a broken import
does not prevent the server from starting -- the health endpoint
reports the failure instead.

Usage::

    # Development (auto-reload)
    uvicorn grove_server:app --reload --port 8421

    # Or run directly
    python grove_server.py
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grove.src.models import TreeConfig

logger = logging.getLogger("grove")

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Grove API",
    description=(
        "Two-level item index with cascading selection and "
        "tri-state check propagation for point-cloud viewers."
    ),
    version="0.1.0",
)

# ---------------------------------------------------------------------------
# CORS -- allow local viewer origins
# ---------------------------------------------------------------------------

_ALLOWED_ORIGINS = [
    "http://localhost:5173",   # Vite dev server
    "http://localhost:8421",   # Self (for Swagger UI)
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8421",
    "app://.",                 # Electron production
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_router_status: dict[str, Any] = {"loaded": False, "error": None}


def _mount_grove(config: TreeConfig | None = None) -> None:
    """Mount the Grove router at ``/api/grove/`` with a fresh tree."""
    try:
        from grove.src.server import init_grove_tree, router as grove_router

        init_grove_tree(config)
        app.include_router(grove_router, prefix="/api/grove", tags=["grove"])
        _router_status["loaded"] = True
        logger.info("Grove router mounted at /api/grove/")
    except Exception as exc:
        _router_status["error"] = str(exc)
        logger.warning("Grove router failed to load: %s", exc)


@app.get("/api/health")
async def unified_health() -> dict[str, Any]:
    """Return overall server health.

    Returns:
        Dictionary with status ("ok" or "error"), version, and router status.
    """
    return {
        "status": "ok" if _router_status["loaded"] else "error",
        "version": "0.1.0",
        "grove": _router_status,
    }


_mount_grove()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_server(host: str = "127.0.0.1", port: int = 8421) -> None:
    """Start the Grove server via uvicorn.

    Args:
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8421.
    """
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    run_server()
