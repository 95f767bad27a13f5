from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Literal, Optional, Union

from interview_conduct.utils.enums import (
    InterviewResult,
    InterviewStatus,
    Recommendation,
)


class Interview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_application_id: str
    template_id: Optional[str] = None
    type: str
    stage: Optional[str] = None
    status: str = InterviewStatus.SCHEDULED.value
    scheduled_at: Optional[datetime] = None
    duration_minutes: int = 60
    actual_start_time: Optional[datetime] = None
    overall_rating: Optional[int] = None
    result: Optional[str] = None
    recommendation: Optional[str] = None
    next_steps: Optional[str] = None
    notes: Optional[str] = None


class JobApplication(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    stage: str = ""
    current_stage_id: Optional[str] = None


class PipelineStage(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    order: int


# Interview update commands. Each path carries only the fields it needs.

class MarkInProgress(BaseModel):
    kind: Literal["mark_in_progress"] = "mark_in_progress"
    started_at: datetime


class SubmitEvaluation(BaseModel):
    kind: Literal["submit_evaluation"] = "submit_evaluation"
    status: InterviewStatus = InterviewStatus.COMPLETED
    result: InterviewResult
    overall_rating: Optional[int] = None
    notes: str = ""
    recommendation: Recommendation
    next_steps: str = ""


InterviewUpdateCommand = Annotated[
    Union[MarkInProgress, SubmitEvaluation],
    Field(discriminator="kind"),
]
