"""Outbound notifications for request milestones and completion."""

import logging
from abc import ABC, abstractmethod

from ..models.restoration import ProjectResurrectionRequest

logger = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    async def send(
        self, event: str, request: ProjectResurrectionRequest, recipients: list[str]
    ) -> None:
        ...


class LoggingNotifier(Notifier):
    """Writes notifications to the log instead of delivering them."""

    async def send(
        self, event: str, request: ProjectResurrectionRequest, recipients: list[str]
    ) -> None:
        logger.info(
            f"[notify] {event} for request {request.id} ({request.project_name}) "
            f"-> {', '.join(recipients)}: {request.progress.percent_complete:.0f}% complete"
        )
