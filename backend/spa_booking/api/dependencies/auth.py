# backend/spa_booking/api/dependencies/auth.py
"""
Caller identity.

Authentication happens upstream (gateway or identity provider). The API
only receives an opaque identity string, which is stamped into
``created_by`` on new bookings.
"""

import logging
from typing import Optional

from fastapi import Header

logger = logging.getLogger(__name__)

ACTOR_HEADER = "X-Actor-Id"
MAX_ACTOR_ID_LENGTH = 128


def get_actor_id(
    x_actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
) -> Optional[str]:
    """Return the caller identity, or ``None`` for anonymous calls."""
    if x_actor_id is None:
        return None
    actor = x_actor_id.strip()
    if not actor:
        return None
    if len(actor) > MAX_ACTOR_ID_LENGTH:
        logger.warning("Truncating oversized %s header", ACTOR_HEADER)
        actor = actor[:MAX_ACTOR_ID_LENGTH]
    return actor
