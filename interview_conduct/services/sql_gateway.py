import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from interview_conduct.core.database import SessionLocal
from interview_conduct.core.errors import NotFoundError, PersistenceError
from interview_conduct.models.interview import Interview as InterviewRow
from interview_conduct.models.pipeline import (
    JobApplication as JobApplicationRow,
    PipelineStage as PipelineStageRow,
    StageMovement,
)
from interview_conduct.models.progress import InterviewProgress, InterviewResponse
from interview_conduct.models.template import InterviewTemplate
from interview_conduct.schemas.interview import (
    Interview,
    InterviewUpdateCommand,
    JobApplication,
    MarkInProgress,
    PipelineStage,
    SubmitEvaluation,
)
from interview_conduct.schemas.progress import ProgressRecord, ResponseRecord
from interview_conduct.schemas.template import Question, Template
from interview_conduct.utils.enums import InterviewStatus, StageChangeReason

logger = logging.getLogger(__name__)


def _get_or_raise(db: Session, model, key, label: str):
    row = db.get(model, key)
    if row is None:
        raise NotFoundError(f"{label} {key} not found")
    return row


class SqlInterviewGateway:
    """
    InterviewGateway backed by SQLAlchemy. Each operation opens its own
    session so a controller can outlive any single request.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def _write(self, db: Session, what: str):
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(f"Failed to {what}") from exc

    async def load_template(self, template_id: str) -> Template:
        with self.session_factory() as db:
            row = _get_or_raise(db, InterviewTemplate, template_id, "Template")
            return Template(
                id=row.id,
                name=row.name or "",
                questions=[Question.model_validate(q) for q in row.questions],
            )

    async def get_interview(self, interview_id: str) -> Interview:
        with self.session_factory() as db:
            return Interview.model_validate(_get_or_raise(db, InterviewRow, interview_id, "Interview"))

    async def mark_interview_in_progress(self, interview_id: str) -> None:
        await self.update_interview(interview_id, MarkInProgress(started_at=datetime.utcnow()))

    async def update_interview(self, interview_id: str, command: InterviewUpdateCommand) -> Interview:
        with self.session_factory() as db:
            row = _get_or_raise(db, InterviewRow, interview_id, "Interview")

            if isinstance(command, MarkInProgress):
                row.status = InterviewStatus.IN_PROGRESS.value
                row.actual_start_time = command.started_at
            elif isinstance(command, SubmitEvaluation):
                row.status = command.status.value
                row.result = command.result.value
                row.overall_rating = command.overall_rating
                row.notes = command.notes
                row.recommendation = command.recommendation.value
                row.next_steps = command.next_steps
                row.actual_end_time = datetime.utcnow()
            else:
                raise ValueError(f"Unsupported interview update: {command!r}")

            self._write(db, f"update interview {interview_id}")
            db.refresh(row)
            return Interview.model_validate(row)

    async def save_progress(self, interview_id: str, record: ProgressRecord) -> None:
        with self.session_factory() as db:
            _get_or_raise(db, InterviewRow, interview_id, "Interview")
            progress = db.get(InterviewProgress, interview_id)
            if progress is None:
                progress = InterviewProgress(interview_id=interview_id)
                db.add(progress)

            progress.template_id = record.template_id
            progress.current_question_index = record.current_question_index
            progress.responses = [r.model_dump(mode="json") for r in record.responses]
            progress.total_time_spent_seconds = record.total_time_spent_seconds
            progress.status = record.status.value
            self._write(db, f"save progress for interview {interview_id}")

    async def get_progress(self, interview_id: str) -> Optional[ProgressRecord]:
        with self.session_factory() as db:
            progress = db.get(InterviewProgress, interview_id)
            if progress is None:
                return None
            return ProgressRecord(
                interview_id=progress.interview_id,
                template_id=progress.template_id,
                current_question_index=progress.current_question_index,
                responses=progress.responses or [],
                total_time_spent_seconds=progress.total_time_spent_seconds,
                status=progress.status,
            )

    async def create_response(self, interview_id: str, record: ResponseRecord) -> None:
        with self.session_factory() as db:
            _get_or_raise(db, InterviewRow, interview_id, "Interview")
            # Re-submitting replaces the stored answer for that question
            row = (
                db.query(InterviewResponse)
                .filter(
                    InterviewResponse.interview_id == interview_id,
                    InterviewResponse.question_id == record.question_id,
                )
                .first()
            )
            if row is None:
                row = InterviewResponse(interview_id=interview_id, question_id=record.question_id)
                db.add(row)

            row.question_text = record.question_text
            row.question_format = record.question_format.value
            row.question_order = record.question_order
            row.answer = record.answer
            row.justification = record.justification
            row.score = record.score
            row.notes = record.notes
            row.time_spent_seconds = record.time_spent_seconds
            row.flagged = record.flagged
            row.is_completed = record.is_completed
            self._write(db, f"save response {record.question_id} for interview {interview_id}")

    async def list_responses(self, interview_id: str) -> List[ResponseRecord]:
        with self.session_factory() as db:
            rows = (
                db.query(InterviewResponse)
                .filter(InterviewResponse.interview_id == interview_id)
                .order_by(InterviewResponse.question_order.asc())
                .all()
            )
            return [ResponseRecord.model_validate(r) for r in rows]

    async def get_job_application(self, application_id: str) -> JobApplication:
        with self.session_factory() as db:
            return JobApplication.model_validate(
                _get_or_raise(db, JobApplicationRow, application_id, "Job application")
            )

    async def list_pipeline_stages(self, application: JobApplication) -> List[PipelineStage]:
        with self.session_factory() as db:
            rows = (
                db.query(PipelineStageRow)
                .filter(PipelineStageRow.job_id == application.job_id)
                .order_by(PipelineStageRow.order.asc())
                .all()
            )
            return [PipelineStage.model_validate(r) for r in rows]

    async def move_application_stage(
        self,
        application_id: str,
        next_stage_id: str,
        rating: Optional[int],
        note: str,
    ) -> None:
        with self.session_factory() as db:
            application = _get_or_raise(db, JobApplicationRow, application_id, "Job application")
            stage = _get_or_raise(db, PipelineStageRow, next_stage_id, "Pipeline stage")

            db.add(StageMovement(
                application_id=application_id,
                from_stage_id=application.current_stage_id,
                to_stage_id=stage.id,
                reason=StageChangeReason.INTERVIEW_COMPLETED.value,
                rating=rating,
                notes=note,
            ))
            application.stage = stage.name
            application.current_stage_id = stage.id
            application.last_activity_at = datetime.utcnow()
            self._write(db, f"move application {application_id} to stage {stage.name}")

    async def invalidate_interview(self, interview_id: str) -> None:
        # Rows are read fresh per operation; nothing is cached at this layer.
        logger.debug("Interview %s views refreshed", interview_id)
