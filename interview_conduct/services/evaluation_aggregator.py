"""
Finalizes a conduct session into durable state.

Steps run strictly in order, one awaited call at a time:

1. precondition checks (no I/O on failure)
2. per-question responses, best-effort
3. progress finalize, best-effort
4. interview update, fatal on failure
5. post-completion hooks (stage advancement, view refresh), never fatal
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from interview_conduct.core.errors import ConductError, PersistenceError, ValidationError
from interview_conduct.schemas.evaluation import Evaluation
from interview_conduct.schemas.interview import Interview, SubmitEvaluation
from interview_conduct.schemas.session import QuestionResponse, SessionState
from interview_conduct.schemas.template import Template
from interview_conduct.services.gateway import InterviewGateway, Notifier, log_notifier
from interview_conduct.services.progress_persister import (
    ProgressPersister,
    index_questions,
    to_response_record,
)
from interview_conduct.services.response_store import ResponseStore
from interview_conduct.services.stage_advancement import (
    AdvancementResult,
    StageAdvancementPolicy,
)
from interview_conduct.utils.enums import (
    InterviewResult,
    NotifyKind,
    ProgressStatus,
    Recommendation,
)

logger = logging.getLogger(__name__)

RESULT_BY_RECOMMENDATION = {
    Recommendation.STRONG_HIRE: InterviewResult.PASS,
    Recommendation.HIRE: InterviewResult.PASS,
    Recommendation.NO_HIRE: InterviewResult.FAIL,
    Recommendation.STRONG_NO_HIRE: InterviewResult.FAIL,
}


@dataclass
class FinalizeOutcome:
    evaluation: Evaluation
    interview: Interview
    average_score: Optional[float] = None
    persisted_question_ids: List[str] = field(default_factory=list)
    failed_question_ids: List[str] = field(default_factory=list)
    progress_saved: bool = False
    advancement: Optional[AdvancementResult] = None
    warnings: List[str] = field(default_factory=list)


def result_for(recommendation: Recommendation) -> InterviewResult:
    return RESULT_BY_RECOMMENDATION[recommendation]


def average_score(responses: List[QuestionResponse]) -> Optional[float]:
    scores = [r.score for r in responses if r.score is not None]
    if not scores:
        return None
    return sum(scores) / len(scores)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def overall_rating_for(evaluation: Evaluation, average: Optional[float]) -> Optional[int]:
    if evaluation.overall_score is not None:
        return evaluation.overall_score
    if average is None:
        return None
    return round_half_up(average)


def compose_notes(evaluation: Evaluation) -> str:
    strengths = [s.strip() for s in evaluation.strengths if s and s.strip()]
    weaknesses = [w.strip() for w in evaluation.weaknesses if w and w.strip()]
    parts = [
        evaluation.overall_notes.strip(),
        f"Strengths: {', '.join(strengths)}" if strengths else "",
        f"Areas for Improvement: {', '.join(weaknesses)}" if weaknesses else "",
        f"Next Steps: {evaluation.next_steps.strip()}" if evaluation.next_steps.strip() else "",
    ]
    return "\n\n".join(p for p in parts if p)


def validate_submission(evaluation: Evaluation) -> None:
    missing = []
    if evaluation.overall_score is None:
        missing.append("overall score")
    if evaluation.recommendation is None:
        missing.append("recommendation")
    if missing:
        raise ValidationError(f"Evaluation is missing {' and '.join(missing)}")


class EvaluationAggregator:
    def __init__(
        self,
        gateway: InterviewGateway,
        notify: Notifier = log_notifier,
        clock: Optional[Callable[[], datetime]] = None,
        persister: Optional[ProgressPersister] = None,
        advancement: Optional[StageAdvancementPolicy] = None,
        on_submitted: Optional[Callable[[FinalizeOutcome], Awaitable[None]]] = None,
    ):
        self.gateway = gateway
        self.notify = notify
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.persister = persister or ProgressPersister(gateway)
        self.advancement = advancement or StageAdvancementPolicy(gateway)
        self.on_submitted = on_submitted

    async def finalize(
        self,
        interview: Interview,
        template: Template,
        session: SessionState,
        responses: ResponseStore,
        evaluation: Evaluation,
    ) -> FinalizeOutcome:
        try:
            validate_submission(evaluation)
            if session.start_time is None:
                raise ValidationError("not started")
        except ValidationError as exc:
            self.notify(NotifyKind.ERROR, f"Interview must be started and fully evaluated: {exc}")
            raise

        evaluation = evaluation.model_copy(update={"completed_at": self.clock()})
        final_responses = responses.non_empty(template)
        outcome = FinalizeOutcome(evaluation=evaluation, interview=interview)

        await self._persist_responses(interview.id, template, final_responses, outcome)
        await self._finalize_progress(interview.id, template, responses, session, outcome)

        outcome.average_score = average_score(final_responses)
        outcome.interview = await self._update_interview(interview, evaluation, outcome.average_score)

        await self._after_completion(outcome)

        self.notify(NotifyKind.SUCCESS, "Interview evaluation has been submitted and saved successfully.")
        return outcome

    async def _persist_responses(
        self,
        interview_id: str,
        template: Template,
        final_responses: List[QuestionResponse],
        outcome: FinalizeOutcome,
    ) -> None:
        questions = index_questions(template)
        for response in final_responses:
            record = to_response_record(interview_id, response, questions, is_completed=True)
            try:
                await self.gateway.create_response(interview_id, record)
            except Exception:
                # One bad response must not sink the evaluation
                logger.exception(
                    "Failed to save response for question %s of interview %s",
                    response.question_id,
                    interview_id,
                )
                outcome.failed_question_ids.append(response.question_id)
                continue
            outcome.persisted_question_ids.append(response.question_id)

        if outcome.failed_question_ids:
            message = f"{len(outcome.failed_question_ids)} question response(s) could not be saved."
            outcome.warnings.append(message)
            self.notify(NotifyKind.WARNING, message)

    async def _finalize_progress(
        self,
        interview_id: str,
        template: Template,
        responses: ResponseStore,
        session: SessionState,
        outcome: FinalizeOutcome,
    ) -> None:
        try:
            await self.persister.save(
                interview_id,
                template,
                responses,
                session.current_question_index,
                session.total_time_spent_seconds,
                ProgressStatus.COMPLETED,
            )
        except ConductError as exc:
            logger.exception("Failed to finalize progress for interview %s", interview_id)
            message = f"Interview progress could not be finalized: {exc}"
            outcome.warnings.append(message)
            self.notify(NotifyKind.WARNING, message)
            return
        outcome.progress_saved = True

    async def _update_interview(
        self,
        interview: Interview,
        evaluation: Evaluation,
        average: Optional[float],
    ) -> Interview:
        command = SubmitEvaluation(
            result=result_for(evaluation.recommendation),
            overall_rating=overall_rating_for(evaluation, average),
            notes=compose_notes(evaluation),
            recommendation=evaluation.recommendation,
            next_steps=evaluation.next_steps,
        )
        try:
            return await self.gateway.update_interview(interview.id, command)
        except Exception as exc:
            logger.exception("Error submitting evaluation for interview %s", interview.id)
            self.notify(NotifyKind.ERROR, "Failed to submit interview evaluation.")
            if isinstance(exc, ConductError):
                raise
            raise PersistenceError(f"Submission failed for interview {interview.id}") from exc

    async def _after_completion(self, outcome: FinalizeOutcome) -> None:
        outcome.advancement = await self.advancement.apply(outcome.interview)
        if outcome.advancement.advanced:
            self.notify(NotifyKind.INFO, outcome.advancement.note)

        try:
            await self.gateway.invalidate_interview(outcome.interview.id)
        except Exception:
            logger.warning("Could not refresh cached views of interview %s", outcome.interview.id, exc_info=True)

        if self.on_submitted is not None:
            try:
                await self.on_submitted(outcome)
            except Exception:
                logger.warning(
                    "on_submitted hook failed for interview %s, evaluation was saved",
                    outcome.interview.id,
                    exc_info=True,
                )
