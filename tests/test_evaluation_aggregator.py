import pytest

from interview_conduct.core.errors import NotFoundError, PersistenceError, ValidationError
from interview_conduct.schemas.evaluation import Evaluation
from interview_conduct.schemas.interview import SubmitEvaluation
from interview_conduct.schemas.session import QuestionResponse, SessionState
from interview_conduct.services.evaluation_aggregator import (
    EvaluationAggregator,
    average_score,
    compose_notes,
    overall_rating_for,
    result_for,
)
from interview_conduct.services.response_store import ResponseStore
from interview_conduct.utils.enums import InterviewResult, Recommendation, SessionStatus


@pytest.fixture
def aggregator(gateway, notifications, clock):
    return EvaluationAggregator(gateway, notify=notifications, clock=clock)


@pytest.fixture
def started(clock):
    return SessionState(
        status=SessionStatus.COMPLETED,
        current_question_index=2,
        start_time=clock(),
        total_time_spent_seconds=85,
    )


@pytest.fixture
def answered():
    return (
        ResponseStore()
        .upsert(QuestionResponse(question_id="question-1", answer="Ledger service", score=4))
        .upsert(QuestionResponse(question_id="question-2", score=3, notes="window functions"))
        .upsert(QuestionResponse(question_id="question-3", answer="Yes, already does"))
    )


def hire(**kwargs):
    return Evaluation(overall_score=4, recommendation=Recommendation.HIRE, **kwargs)


@pytest.mark.parametrize(
    "recommendation, expected",
    [
        (Recommendation.STRONG_HIRE, InterviewResult.PASS),
        (Recommendation.HIRE, InterviewResult.PASS),
        (Recommendation.NO_HIRE, InterviewResult.FAIL),
        (Recommendation.STRONG_NO_HIRE, InterviewResult.FAIL),
    ],
)
def test_result_mapping(recommendation, expected):
    assert result_for(recommendation) == expected


def test_average_ignores_unscored_responses():
    responses = [
        QuestionResponse(question_id="a", score=4),
        QuestionResponse(question_id="b", answer="no score"),
        QuestionResponse(question_id="c", score=3),
    ]
    assert average_score(responses) == 3.5
    assert average_score([QuestionResponse(question_id="a", answer="x")]) is None


def test_overall_rating_falls_back_to_rounded_average():
    assert overall_rating_for(Evaluation(overall_score=2), 4.6) == 2
    assert overall_rating_for(Evaluation(), 3.5) == 4
    assert overall_rating_for(Evaluation(), 2.4) == 2
    assert overall_rating_for(Evaluation(), None) is None


def test_compose_notes_skips_empty_sections():
    evaluation = Evaluation(
        overall_notes="Solid systems thinking.",
        strengths=["architecture", "", "  "],
        weaknesses=["", "testing discipline"],
        next_steps="",
    )
    assert compose_notes(evaluation) == (
        "Solid systems thinking.\n\nStrengths: architecture\n\nAreas for Improvement: testing discipline"
    )
    assert compose_notes(Evaluation(next_steps="Schedule final round")) == "Next Steps: Schedule final round"


async def test_finalize_runs_steps_in_order(aggregator, gateway, template, started, answered):
    outcome = await aggregator.finalize(gateway.interview, template, started, answered, hire())

    assert gateway.operations() == [
        "create_response",
        "create_response",
        "create_response",
        "save_progress",
        "update_interview",
        "get_job_application",
        "list_pipeline_stages",
        "move_application_stage",
        "invalidate_interview",
    ]
    assert outcome.persisted_question_ids == ["question-1", "question-2", "question-3"]
    assert outcome.progress_saved is True
    assert outcome.evaluation.completed_at is not None


async def test_finalize_writes_completed_records(aggregator, gateway, template, started, answered):
    await aggregator.finalize(gateway.interview, template, started, answered, hire())

    record = gateway.responses["question-2"]
    assert record.is_completed is True
    assert record.question_text == "Rate their SQL fluency."
    assert record.question_order == 2

    progress = gateway.progress["int-1"]
    assert progress.status.value == "completed"
    assert progress.current_question_index == 2
    assert progress.total_time_spent_seconds == 85


async def test_interview_update_payload(aggregator, gateway, template, started, answered):
    evaluation = Evaluation(
        overall_score=3,
        recommendation=Recommendation.STRONG_NO_HIRE,
        overall_notes="Struggled with fundamentals.",
        strengths=["communication"],
        next_steps="Send rejection",
    )

    await aggregator.finalize(gateway.interview, template, started, answered, evaluation)

    command = next(args for name, args in gateway.calls if name == "update_interview")
    assert isinstance(command, SubmitEvaluation)
    assert command.status.value == "Completed"
    assert command.result == InterviewResult.FAIL
    assert command.overall_rating == 3
    assert command.recommendation == Recommendation.STRONG_NO_HIRE
    assert command.next_steps == "Send rejection"
    assert command.notes == (
        "Struggled with fundamentals.\n\nStrengths: communication\n\nNext Steps: Send rejection"
    )


async def test_one_failed_response_does_not_abort(aggregator, gateway, template, started, answered, notifications):
    gateway.fail["create_response"] = {"question-2"}

    outcome = await aggregator.finalize(gateway.interview, template, started, answered, hire())

    attempted = [args for name, args in gateway.calls if name == "create_response"]
    assert attempted == ["question-1", "question-2", "question-3"]
    assert outcome.failed_question_ids == ["question-2"]
    assert outcome.persisted_question_ids == ["question-1", "question-3"]
    assert "update_interview" in gateway.operations()
    assert "warning" in notifications.kinds()
    assert notifications.kinds()[-1] == "success"


async def test_progress_failure_is_surfaced_but_not_fatal(aggregator, gateway, template, started, answered):
    gateway.fail["save_progress"] = True

    outcome = await aggregator.finalize(gateway.interview, template, started, answered, hire())

    assert outcome.progress_saved is False
    assert outcome.warnings
    assert outcome.interview.status == "Completed"


async def test_interview_update_failure_is_fatal(aggregator, gateway, template, started, answered, notifications):
    gateway.fail["update_interview"] = True

    with pytest.raises(PersistenceError):
        await aggregator.finalize(gateway.interview, template, started, answered, hire())

    # earlier writes are not rolled back and later hooks never run
    assert len(gateway.responses) == 3
    assert "int-1" in gateway.progress
    assert "move_application_stage" not in gateway.operations()
    assert notifications.kinds()[-1] == "error"


async def test_deleted_interview_is_reported_as_not_found(aggregator, gateway, template, started, answered):
    async def missing(interview_id, command):
        raise NotFoundError(f"Interview {interview_id} not found")

    gateway.update_interview = missing

    with pytest.raises(NotFoundError):
        await aggregator.finalize(gateway.interview, template, started, answered, hire())
    assert "move_application_stage" not in gateway.operations()


async def test_missing_start_time_performs_no_io(aggregator, gateway, template, answered):
    not_started = SessionState()

    with pytest.raises(ValidationError, match="not started"):
        await aggregator.finalize(gateway.interview, template, not_started, answered, hire())

    assert gateway.calls == []


@pytest.mark.parametrize(
    "evaluation",
    [
        Evaluation(recommendation=Recommendation.HIRE),
        Evaluation(overall_score=4),
        Evaluation(),
    ],
)
async def test_incomplete_evaluation_performs_no_io(aggregator, gateway, template, started, answered, evaluation):
    with pytest.raises(ValidationError):
        await aggregator.finalize(gateway.interview, template, started, answered, evaluation)
    assert gateway.calls == []


async def test_advancement_failure_is_not_a_submission_failure(aggregator, gateway, template, started, answered):
    gateway.fail["move_application_stage"] = True

    outcome = await aggregator.finalize(gateway.interview, template, started, answered, hire())

    assert outcome.advancement.advanced is False
    assert outcome.advancement.error
    assert outcome.interview.status == "Completed"
    assert "invalidate_interview" in gateway.operations()


async def test_on_submitted_hook_failure_is_swallowed(gateway, template, started, answered, clock):
    seen = []

    async def hook(outcome):
        seen.append(outcome.interview.id)
        raise RuntimeError("downstream webhook down")

    aggregator = EvaluationAggregator(gateway, clock=clock, on_submitted=hook)
    outcome = await aggregator.finalize(gateway.interview, template, started, answered, hire())

    assert seen == ["int-1"]
    assert outcome.interview.result == "Pass"


async def test_only_non_empty_responses_are_persisted(aggregator, gateway, template, started):
    store = ResponseStore().upsert(QuestionResponse(question_id="question-3", notes="ask again"))

    outcome = await aggregator.finalize(gateway.interview, template, started, store, hire())

    assert outcome.persisted_question_ids == ["question-3"]
    assert outcome.average_score is None
