"""Entry point for the time log service."""

import logging
import os
import sys

from app import create_app
from config import Config
from errors import PersistenceError

logger = logging.getLogger(__name__)


def main():
    config = Config(os.environ.get("CONFIG_PATH", "config.yaml"))

    logging.basicConfig(
        level=getattr(logging, config["logging"]["level"], logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        app = create_app(config)
    except PersistenceError as exc:
        logger.critical("Cannot load time logs: %s", exc)
        sys.exit(1)

    server = config["server"]
    logger.info("Server is running on http://%s:%d", server["host"], server["port"])
    app.run(host=server["host"], port=server["port"], debug=server["debug"])


if __name__ == "__main__":
    main()
