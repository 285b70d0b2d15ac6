"""Run the chat persistence API on the configured loopback address."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from . import create_app
from .config import AppConfig

LOGGER = logging.getLogger(__name__)


def main() -> None:
    load_dotenv()
    config = AppConfig.from_env()
    app = create_app(config)

    LOGGER.info(
        "Serving chat store on %s:%d (reload=%s)",
        config.backend_host,
        config.backend_port,
        config.backend_reload,
    )
    app.run(
        host=config.backend_host,
        port=config.backend_port,
        debug=config.backend_reload,
        use_reloader=config.backend_reload,
    )


if __name__ == "__main__":  # pragma: no cover - script entry point
    main()
