"""
asgi.py -- Application entry point for LifeLink.

Run with:  uvicorn asgi:app --reload
           python asgi.py            (binds HOST:PORT from settings, default 127.0.0.1:3001)
"""

import uvicorn

from api.main import app
from core.config import get_settings

__all__ = ["app"]


def main() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
