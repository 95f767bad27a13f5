"""
Interview-conduct session state machine.

The transition functions at the top of this module are pure: they take the
full current ConductState plus the current time and return the next state.
SessionController wraps them, holds the live state for one interview and
performs the side effects (marking the interview in progress, best-effort
saves, finalization).

    not_started -> in_progress <-> paused
                        |            |
                        +--> completed <--+
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from interview_conduct.core.errors import ConductError, PersistenceError, SessionStateError
from interview_conduct.schemas.evaluation import Evaluation
from interview_conduct.schemas.interview import Interview
from interview_conduct.schemas.session import QuestionResponse, SessionState
from interview_conduct.schemas.template import Question, Template
from interview_conduct.services.evaluation_aggregator import (
    EvaluationAggregator,
    FinalizeOutcome,
)
from interview_conduct.services.gateway import InterviewGateway, Notifier, log_notifier
from interview_conduct.services.progress_persister import ProgressPersister
from interview_conduct.services.response_store import ResponseStore, question_key
from interview_conduct.services.session_timer import SessionTimer
from interview_conduct.utils.enums import NotifyKind, ProgressStatus, SessionStatus

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ConductState:
    template: Template
    status: SessionStatus = SessionStatus.NOT_STARTED
    current_question_index: int = 0
    start_time: Optional[datetime] = None
    question_start_time: Optional[datetime] = None
    timer: SessionTimer = field(default_factory=SessionTimer)
    responses: ResponseStore = field(default_factory=ResponseStore)

    @property
    def question_count(self) -> int:
        return len(self.template.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_question_index < self.question_count:
            return self.template.questions[self.current_question_index]
        return None

    @property
    def current_key(self) -> Optional[str]:
        question = self.current_question
        if question is None:
            return None
        return question_key(question, self.current_question_index)

    def session_state(self, now: datetime) -> SessionState:
        return SessionState(
            status=self.status,
            current_question_index=self.current_question_index,
            start_time=self.start_time,
            total_time_spent_seconds=self.timer.elapsed_seconds(now),
        )


# ----------------------------
# Lifecycle transitions
# ----------------------------
def start_session(state: ConductState, now: datetime) -> ConductState:
    if state.status != SessionStatus.NOT_STARTED:
        raise SessionStateError("Session has already been started")
    return replace(
        state,
        status=SessionStatus.IN_PROGRESS,
        start_time=now,
        question_start_time=now,
        timer=state.timer.start(now),
    )


def pause_session(state: ConductState, now: datetime) -> ConductState:
    if state.status != SessionStatus.IN_PROGRESS:
        raise SessionStateError("Only a running session can be paused")
    state = commit_current(state, now)
    return replace(
        state,
        status=SessionStatus.PAUSED,
        question_start_time=None,
        timer=state.timer.pause(now),
    )


def resume_session(state: ConductState, now: datetime) -> ConductState:
    if state.status != SessionStatus.PAUSED:
        raise SessionStateError("Only a paused session can be resumed")
    return replace(
        state,
        status=SessionStatus.IN_PROGRESS,
        question_start_time=now,
        timer=state.timer.resume(now),
    )


def complete_session(state: ConductState, now: datetime) -> ConductState:
    if state.status == SessionStatus.NOT_STARTED:
        raise SessionStateError("Session has not been started")
    return replace(
        state,
        status=SessionStatus.COMPLETED,
        question_start_time=None,
        timer=state.timer.pause(now),
    )


# ----------------------------
# Navigation
# ----------------------------
def commit_current(state: ConductState, now: datetime) -> ConductState:
    """Fold the time spent on the current question into its stored response."""
    key = state.current_key
    if key is None:
        return state

    spent = 0
    if state.question_start_time is not None:
        spent = max(0, int((now - state.question_start_time).total_seconds()))

    existing = state.responses.get_or_empty(key)
    updated = existing.model_copy(
        update={"time_spent_seconds": existing.time_spent_seconds + spent}
    )
    running = state.status == SessionStatus.IN_PROGRESS
    return replace(
        state,
        responses=state.responses.upsert(updated),
        question_start_time=now if running else None,
    )


def go_to(state: ConductState, index: int, now: datetime) -> ConductState:
    if not 0 <= index < state.question_count:
        return state
    state = commit_current(state, now)
    return replace(state, current_question_index=index)


def next_question(state: ConductState, now: datetime) -> Tuple[ConductState, bool]:
    """
    Advance one question. On the last question the session completes instead
    and the second value reports that it is ready to evaluate.
    """
    if state.question_count == 0:
        return state, False

    state = commit_current(state, now)
    if state.current_question_index < state.question_count - 1:
        return replace(state, current_question_index=state.current_question_index + 1), False

    if state.status == SessionStatus.NOT_STARTED:
        return state, False
    if state.status != SessionStatus.COMPLETED:
        state = complete_session(state, now)
    return state, True


def previous_question(state: ConductState, now: datetime) -> ConductState:
    return go_to(state, state.current_question_index - 1, now)


# ----------------------------
# Response edits (current question)
# ----------------------------
def _edit_current(state: ConductState, **changes) -> ConductState:
    key = state.current_key
    if key is None:
        return state
    existing = state.responses.get_or_empty(key)
    return replace(state, responses=state.responses.upsert(existing.model_copy(update=changes)))


def set_answer(state: ConductState, answer: str) -> ConductState:
    return _edit_current(state, answer=answer)


def set_score(state: ConductState, score: Optional[int]) -> ConductState:
    return _edit_current(state, score=score)


def set_notes(state: ConductState, notes: str) -> ConductState:
    return _edit_current(state, notes=notes)


def toggle_flag(state: ConductState) -> ConductState:
    key = state.current_key
    if key is None:
        return state
    return _edit_current(state, flagged=not state.responses.get_or_empty(key).flagged)


class SessionController:
    """
    Live conduct session for one interview.

    Navigation and edits are synchronous and never rejected; lifecycle calls
    raise SessionStateError on an illegal transition. Every call that talks
    to a collaborator is a coroutine.
    """

    def __init__(
        self,
        interview: Interview,
        template: Template,
        gateway: InterviewGateway,
        notify: Notifier = log_notifier,
        clock: Clock = utcnow,
        persister: Optional[ProgressPersister] = None,
        aggregator: Optional[EvaluationAggregator] = None,
    ):
        self.interview = interview
        self.gateway = gateway
        self.notify = notify
        self.clock = clock
        self.persister = persister or ProgressPersister(gateway)
        self.aggregator = aggregator or EvaluationAggregator(
            gateway, notify=notify, clock=clock, persister=self.persister
        )
        self._state = ConductState(template=template)
        self.last_outcome: Optional[FinalizeOutcome] = None

    @classmethod
    async def open(
        cls,
        interview: Interview,
        gateway: InterviewGateway,
        **kwargs,
    ) -> "SessionController":
        if not interview.template_id:
            raise SessionStateError(f"Interview {interview.id} has no template")
        template = await gateway.load_template(interview.template_id)
        return cls(interview, template, gateway, **kwargs)

    @property
    def state(self) -> ConductState:
        return self._state

    @property
    def template(self) -> Template:
        return self._state.template

    def snapshot(self) -> SessionState:
        return self._state.session_state(self.clock())

    def current_response(self) -> Optional[QuestionResponse]:
        key = self._state.current_key
        if key is None:
            return None
        return self._state.responses.get_or_empty(key)

    # Lifecycle
    async def start(self) -> SessionState:
        self._state = start_session(self._state, self.clock())
        logger.info("Interview %s conduct started", self.interview.id)
        try:
            await self.gateway.mark_interview_in_progress(self.interview.id)
        except Exception:
            logger.exception("Could not mark interview %s in progress", self.interview.id)
            self.notify(NotifyKind.WARNING, "Interview status could not be updated.")
        return self.snapshot()

    async def pause(self) -> SessionState:
        self._state = pause_session(self._state, self.clock())
        try:
            await self._save(ProgressStatus.IN_PROGRESS)
        except ConductError:
            logger.warning("Best-effort progress save on pause failed for %s", self.interview.id, exc_info=True)
            self.notify(NotifyKind.WARNING, "Progress could not be saved while pausing.")
        return self.snapshot()

    def resume(self) -> SessionState:
        self._state = resume_session(self._state, self.clock())
        return self.snapshot()

    # Navigation
    def go_to(self, index: int) -> SessionState:
        self._state = go_to(self._state, index, self.clock())
        return self.snapshot()

    def next(self) -> bool:
        """Move forward; returns True once the session is ready to evaluate."""
        self._state, ready = next_question(self._state, self.clock())
        if ready:
            logger.info("Interview %s reached the last question, ready to evaluate", self.interview.id)
        return ready

    def previous(self) -> SessionState:
        self._state = previous_question(self._state, self.clock())
        return self.snapshot()

    # Edits
    def set_answer(self, answer: str) -> None:
        self._state = set_answer(self._state, answer)

    def set_score(self, score: Optional[int]) -> None:
        self._state = set_score(self._state, score)

    def set_notes(self, notes: str) -> None:
        self._state = set_notes(self._state, notes)

    def toggle_flag(self) -> None:
        self._state = toggle_flag(self._state)

    # Persistence
    async def _save(self, status: ProgressStatus):
        now = self.clock()
        committed = commit_current(self._state, now)
        return await self.persister.save(
            self.interview.id,
            committed.template,
            committed.responses,
            committed.current_question_index,
            committed.timer.elapsed_seconds(now),
            status,
        )

    async def save_progress(self):
        """Explicit partial save. Failures are reported and re-raised."""
        try:
            record = await self._save(ProgressStatus.IN_PROGRESS)
        except PersistenceError:
            logger.exception("Error saving progress for interview %s", self.interview.id)
            self.notify(NotifyKind.ERROR, "Failed to save interview progress.")
            raise
        self.notify(NotifyKind.SUCCESS, "Interview progress has been saved successfully.")
        return record

    async def submit_evaluation(self, evaluation: Evaluation) -> FinalizeOutcome:
        """
        Finalize the session once. A submission that failed before the
        interview was updated can be retried; a successful one cannot.
        """
        if self.last_outcome is not None:
            logger.warning("Interview %s evaluation was already submitted", self.interview.id)
            raise SessionStateError("Evaluation has already been submitted")

        now = self.clock()
        committed = commit_current(self._state, now)
        outcome = await self.aggregator.finalize(
            self.interview,
            committed.template,
            committed.session_state(now),
            committed.responses,
            evaluation,
        )
        self._state = complete_session(committed, now) if committed.status != SessionStatus.COMPLETED else committed
        self.interview = outcome.interview
        self.last_outcome = outcome
        return outcome
