import logging
from typing import Dict, List, Tuple

from interview_conduct.core.errors import ConductError, PersistenceError
from interview_conduct.schemas.progress import ProgressRecord, ResponseRecord
from interview_conduct.schemas.session import QuestionResponse
from interview_conduct.schemas.template import Question, Template
from interview_conduct.services.gateway import InterviewGateway
from interview_conduct.services.response_store import ResponseStore, question_key
from interview_conduct.utils.enums import ProgressStatus, QuestionFormat

logger = logging.getLogger(__name__)


def index_questions(template: Template) -> Dict[str, Tuple[int, Question]]:
    return {
        question_key(question, index): (index, question)
        for index, question in enumerate(template.questions)
    }


def to_response_record(
    interview_id: str,
    response: QuestionResponse,
    questions: Dict[str, Tuple[int, Question]],
    is_completed: bool,
) -> ResponseRecord:
    index, question = questions.get(response.question_id, (0, None))
    return ResponseRecord(
        interview_id=interview_id,
        question_id=response.question_id,
        question_text=question.question if question else "",
        question_format=question.format if question else QuestionFormat.SHORT_DESCRIPTION,
        question_order=max(1, (question.order if question else None) or (index + 1)),
        answer=response.answer,
        score=response.score,
        notes=response.notes,
        time_spent_seconds=response.time_spent_seconds,
        flagged=response.flagged,
        is_completed=is_completed,
    )


def build_progress_record(
    interview_id: str,
    template: Template,
    responses: ResponseStore,
    current_question_index: int,
    total_time_spent_seconds: int,
    status: ProgressStatus = ProgressStatus.IN_PROGRESS,
) -> ProgressRecord:
    completed = status == ProgressStatus.COMPLETED
    questions = index_questions(template)
    records: List[ResponseRecord] = [
        to_response_record(interview_id, r, questions, is_completed=completed)
        for r in responses.non_empty(template)
    ]
    if completed:
        current_question_index = max(0, len(template.questions) - 1)

    return ProgressRecord(
        interview_id=interview_id,
        template_id=template.id,
        current_question_index=current_question_index,
        responses=records,
        total_time_spent_seconds=total_time_spent_seconds,
        status=status,
    )


class ProgressPersister:
    """
    Writes a partial (or final) snapshot of a session.

    A failed save raises PersistenceError; the caller's session state is
    never touched, so the save can simply be retried.
    """

    def __init__(self, gateway: InterviewGateway):
        self.gateway = gateway

    async def save(
        self,
        interview_id: str,
        template: Template,
        responses: ResponseStore,
        current_question_index: int,
        total_time_spent_seconds: int,
        status: ProgressStatus = ProgressStatus.IN_PROGRESS,
    ) -> ProgressRecord:
        record = build_progress_record(
            interview_id,
            template,
            responses,
            current_question_index,
            total_time_spent_seconds,
            status,
        )
        try:
            await self.gateway.save_progress(interview_id, record)
        except ConductError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to save progress for interview {interview_id}") from exc

        logger.info(
            "Saved %s progress for interview %s (%d responses, %ss)",
            status.value,
            interview_id,
            len(record.responses),
            total_time_spent_seconds,
        )
        return record
