from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING") -> None:
    """Configures the root logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Silence excessively verbose libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    logger.debug("Logging configured with level %s", level)
