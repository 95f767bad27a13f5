import os

# Keep the module-level app off the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest

from interview_conduct.core.errors import PersistenceError
from interview_conduct.schemas.interview import (
    Interview,
    JobApplication,
    PipelineStage,
    SubmitEvaluation,
)
from interview_conduct.schemas.template import Question, RatingScale, Template
from interview_conduct.utils.enums import InterviewStatus, QuestionFormat


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class FakeGateway:
    """
    In-memory InterviewGateway. Every call is appended to ``calls`` as
    (operation, args). ``fail`` maps an operation name to either True
    (always fail) or a set of question ids that fail.
    """

    def __init__(self, interview=None, template=None, application=None, stages=None):
        self.interview = interview
        self.template = template
        self.application = application
        self.stages = stages or []
        self.calls = []
        self.fail = {}
        self.progress = {}
        self.responses = {}
        self.moves = []

    def _maybe_fail(self, operation, key=None):
        rule = self.fail.get(operation)
        if rule is True or (rule and key in rule):
            raise PersistenceError(f"{operation} failed")

    async def load_template(self, template_id):
        self.calls.append(("load_template", template_id))
        return self.template

    async def get_interview(self, interview_id):
        self.calls.append(("get_interview", interview_id))
        return self.interview

    async def mark_interview_in_progress(self, interview_id):
        self.calls.append(("mark_interview_in_progress", interview_id))
        self._maybe_fail("mark_interview_in_progress")

    async def save_progress(self, interview_id, record):
        self.calls.append(("save_progress", record))
        self._maybe_fail("save_progress")
        self.progress[interview_id] = record

    async def get_progress(self, interview_id):
        return self.progress.get(interview_id)

    async def create_response(self, interview_id, record):
        self.calls.append(("create_response", record.question_id))
        self._maybe_fail("create_response", record.question_id)
        self.responses[record.question_id] = record

    async def list_responses(self, interview_id):
        return list(self.responses.values())

    async def update_interview(self, interview_id, command):
        self.calls.append(("update_interview", command))
        self._maybe_fail("update_interview")
        if isinstance(command, SubmitEvaluation):
            self.interview = self.interview.model_copy(update={
                "status": command.status.value,
                "result": command.result.value,
                "overall_rating": command.overall_rating,
                "notes": command.notes,
                "recommendation": command.recommendation.value,
                "next_steps": command.next_steps,
            })
        return self.interview

    async def get_job_application(self, application_id):
        self.calls.append(("get_job_application", application_id))
        self._maybe_fail("get_job_application")
        return self.application

    async def list_pipeline_stages(self, application):
        self.calls.append(("list_pipeline_stages", application.id))
        return list(self.stages)

    async def move_application_stage(self, application_id, next_stage_id, rating, note):
        self.calls.append(("move_application_stage", next_stage_id))
        self._maybe_fail("move_application_stage")
        self.moves.append((application_id, next_stage_id, rating, note))

    async def invalidate_interview(self, interview_id):
        self.calls.append(("invalidate_interview", interview_id))

    def operations(self):
        return [name for name, _ in self.calls]


class Notifications:
    def __init__(self):
        self.items = []

    def __call__(self, kind, message):
        self.items.append((kind.value, message))

    def kinds(self):
        return [kind for kind, _ in self.items]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifications():
    return Notifications()


@pytest.fixture
def template():
    return Template(
        id="tpl-1",
        name="Backend Engineer",
        questions=[
            Question(question="Walk us through a system you designed.", format=QuestionFormat.LONG_DESCRIPTION, order=1),
            Question(
                question="Rate their SQL fluency.",
                format=QuestionFormat.RATING_WITH_JUSTIFICATION,
                order=2,
                rating_scale=RatingScale(min=1, max=5),
            ),
            Question(question="Would they mentor juniors?", format=QuestionFormat.YES_NO_WITH_JUSTIFICATION, order=3),
        ],
    )


@pytest.fixture
def interview():
    return Interview(
        id="int-1",
        job_application_id="app-1",
        template_id="tpl-1",
        type="Technical",
        status=InterviewStatus.SCHEDULED.value,
    )


@pytest.fixture
def stages():
    return [
        PipelineStage(id="st-final", name="Final", order=3),
        PipelineStage(id="st-screen", name="Screening", order=1),
        PipelineStage(id="st-tech", name="Technical", order=2),
    ]


@pytest.fixture
def application():
    return JobApplication(id="app-1", job_id="job-1", stage="Technical", current_stage_id="st-tech")


@pytest.fixture
def gateway(interview, template, application, stages):
    return FakeGateway(interview=interview, template=template, application=application, stages=stages)


@pytest.fixture
def db_factory():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from interview_conduct.core.database import Base
    from interview_conduct.models import interview, pipeline, progress, template  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def seeded(db_factory):
    from interview_conduct.models.interview import Interview as InterviewRow
    from interview_conduct.models.pipeline import JobApplication as JobApplicationRow
    from interview_conduct.models.pipeline import PipelineStage as PipelineStageRow
    from interview_conduct.models.template import InterviewTemplate, TemplateQuestion

    with db_factory() as db:
        db.add_all([
            PipelineStageRow(id="st-screen", job_id="job-1", name="Screening", order=1),
            PipelineStageRow(id="st-tech", job_id="job-1", name="Technical", order=2),
            PipelineStageRow(id="st-final", job_id="job-1", name="Final", order=3),
            PipelineStageRow(id="st-other", job_id="job-2", name="Offer", order=4),
        ])
        db.add(JobApplicationRow(id="app-1", job_id="job-1", stage="Technical", current_stage_id="st-tech"))
        db.add(InterviewTemplate(id="tpl-1", name="Backend Engineer"))
        db.add_all([
            TemplateQuestion(
                template_id="tpl-1", position=0, order=1,
                question="Walk us through a system you designed.", format="long_description",
            ),
            TemplateQuestion(
                template_id="tpl-1", position=1, order=2,
                question="Rate their SQL fluency.", format="rating_with_justification",
                rating_scale={"min": 1, "max": 5, "labels": {"1": "poor", "5": "expert"}},
            ),
            TemplateQuestion(
                template_id="tpl-1", position=2, order=None,
                question="Would they mentor juniors?", format="yes_no_with_justification",
            ),
        ])
        db.add(InterviewRow(
            id="int-1", job_application_id="app-1", template_id="tpl-1",
            type="Technical", status="Scheduled",
        ))
        db.commit()
    return db_factory
