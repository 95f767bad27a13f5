import logging
from typing import Dict, Optional

from interview_conduct.core.errors import NotFoundError
from interview_conduct.services.gateway import InterviewGateway, NotificationLog
from interview_conduct.services.session_controller import SessionController

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    In-process home for live conduct sessions, one per interview.

    Closing a session discards whatever was not explicitly saved or
    finalized.
    """

    def __init__(self, gateway: InterviewGateway):
        self.gateway = gateway
        self._sessions: Dict[str, SessionController] = {}
        self._notifications: Dict[str, NotificationLog] = {}

    async def open(self, interview_id: str) -> SessionController:
        controller = self._sessions.get(interview_id)
        if controller is not None:
            return controller

        interview = await self.gateway.get_interview(interview_id)
        notifications = NotificationLog()
        controller = await SessionController.open(interview, self.gateway, notify=notifications)
        self._sessions[interview_id] = controller
        self._notifications[interview_id] = notifications
        logger.info("Opened conduct session for interview %s", interview_id)
        return controller

    def get(self, interview_id: str) -> SessionController:
        controller = self._sessions.get(interview_id)
        if controller is None:
            raise NotFoundError(f"No open conduct session for interview {interview_id}")
        return controller

    def notifications(self, interview_id: str) -> Optional[NotificationLog]:
        return self._notifications.get(interview_id)

    def close(self, interview_id: str) -> bool:
        self._notifications.pop(interview_id, None)
        closed = self._sessions.pop(interview_id, None) is not None
        if closed:
            logger.info("Closed conduct session for interview %s, unsaved state discarded", interview_id)
        return closed
