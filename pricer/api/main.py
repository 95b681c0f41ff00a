"""FastAPI application for the price service."""

import os

import uvicorn
from fastapi import FastAPI

from pricer import __version__
from pricer.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("PRICER_HOST", "0.0.0.0")
PORT = int(os.environ.get("PRICER_PORT", "8000"))
DEBUG = os.environ.get("PRICER_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Token Pricer",
    description="USD price resolution across on-chain liquidity venues",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the price API server.

    Configuration via environment variables:
    - PRICER_HOST: Host to bind to (default: 0.0.0.0)
    - PRICER_PORT: Port to bind to (default: 8000)
    - PRICER_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "pricer.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
