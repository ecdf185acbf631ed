"""Entry point for running the API server."""

import uvicorn

from core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",  # noqa: S104
        port=settings.port,
        proxy_headers=True,
    )
