from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from leavedesk.config import Settings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging once per process."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    # SQL echo goes through the engine (settings.db_echo), not the logger level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
