"""Run the service with uvicorn: ``python -m feedcast``."""

from __future__ import annotations

import uvicorn

from feedcast.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("feedcast.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
