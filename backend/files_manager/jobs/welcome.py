from __future__ import annotations

import logging
from typing import Any

from ..extensions import db
from ..models import User
from .queue import JobError, WelcomeJob


logger = logging.getLogger(__name__)


def process_welcome_job(payload: dict[str, Any]) -> str:
    job = WelcomeJob.from_payload(payload)
    user = db.session.get(User, job.user_id)
    if user is None:
        raise JobError("User not found", permanent=True)

    message = f"Welcome {user.email}!"
    logger.info(message)
    return message
