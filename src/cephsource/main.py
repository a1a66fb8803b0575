"""cephsource entrypoint."""

import asyncio
import logging
import sys

from cephsource.adapter import ReceiveAdapter
from cephsource.config import Settings
from cephsource.errors import ConfigError
from cephsource.utils.logging import configure_logging

logger = logging.getLogger("cephsource")


def main() -> int:
    settings = Settings()
    configure_logging(settings.log_level)

    logger.info("cephsource v%s starting", settings.version)
    logger.info("Log level: %s", settings.log_level)
    logger.info("Sink: %s", settings.sink_uri)
    logger.info("Adapter: %s/%s", settings.namespace, settings.name)

    try:
        adapter = ReceiveAdapter(settings)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    asyncio.run(adapter.start())
    return 0


if __name__ == "__main__":
    sys.exit(main())
