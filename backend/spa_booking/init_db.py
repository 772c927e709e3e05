# backend/spa_booking/init_db.py
"""Create the booking and catalog tables."""

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from .database import Base, engine
from . import models  # noqa: F401  (registers mappers on Base.metadata)

logger = logging.getLogger(__name__)


def create_tables(bind: Optional[Engine] = None) -> None:
    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Tables created on %s", target.url.render_as_string(hide_password=True))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_tables()
