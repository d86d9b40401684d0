"""Entry point: ``python -m gateway_api``."""

from __future__ import annotations

import logging

import uvicorn

from common.config import get_settings
from .main import create_app


def main() -> None:
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    logging.getLogger(__name__).info("App is listening on port %d", settings.port)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
