"""
Collaborators the conduct core calls out to.

The core never talks to storage or transport directly; it awaits these
operations one at a time. SqlInterviewGateway is the SQLAlchemy-backed
implementation; tests use an in-memory fake.

The methods are coroutines so a remote backend can be plugged in, but
SqlInterviewGateway runs ordinary blocking Session calls inside them, the
same way the API routes use synchronous sessions from async handlers.
"""
import logging
from typing import Callable, List, Optional, Protocol

from interview_conduct.schemas.interview import (
    Interview,
    InterviewUpdateCommand,
    JobApplication,
    PipelineStage,
)
from interview_conduct.schemas.progress import ProgressRecord, ResponseRecord
from interview_conduct.schemas.template import Template
from interview_conduct.utils.enums import NotifyKind

logger = logging.getLogger(__name__)


class InterviewGateway(Protocol):
    async def load_template(self, template_id: str) -> Template: ...

    async def get_interview(self, interview_id: str) -> Interview: ...

    async def mark_interview_in_progress(self, interview_id: str) -> None: ...

    async def save_progress(self, interview_id: str, record: ProgressRecord) -> None: ...

    async def get_progress(self, interview_id: str) -> Optional[ProgressRecord]: ...

    async def create_response(self, interview_id: str, record: ResponseRecord) -> None: ...

    async def list_responses(self, interview_id: str) -> List[ResponseRecord]: ...

    async def update_interview(self, interview_id: str, command: InterviewUpdateCommand) -> Interview: ...

    async def get_job_application(self, application_id: str) -> JobApplication: ...

    async def list_pipeline_stages(self, application: JobApplication) -> List[PipelineStage]: ...

    async def move_application_stage(
        self,
        application_id: str,
        next_stage_id: str,
        rating: Optional[int],
        note: str,
    ) -> None: ...

    async def invalidate_interview(self, interview_id: str) -> None: ...


Notifier = Callable[[NotifyKind, str], None]


_LEVELS = {
    NotifyKind.SUCCESS: logging.INFO,
    NotifyKind.INFO: logging.INFO,
    NotifyKind.WARNING: logging.WARNING,
    NotifyKind.ERROR: logging.ERROR,
}


def log_notifier(kind: NotifyKind, message: str) -> None:
    logger.log(_LEVELS.get(kind, logging.INFO), "[%s] %s", kind.value, message)


class NotificationLog:
    """Notifier that buffers messages until a client drains them."""

    def __init__(self):
        self.items: List[dict] = []

    def __call__(self, kind: NotifyKind, message: str) -> None:
        log_notifier(kind, message)
        self.items.append({"kind": kind.value, "message": message})

    def drain(self) -> List[dict]:
        items, self.items = self.items, []
        return items
