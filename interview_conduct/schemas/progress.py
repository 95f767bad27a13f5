from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from interview_conduct.utils.enums import ProgressStatus, QuestionFormat


class ResponseRecord(BaseModel):
    """
    A question response denormalized with its question's text, format and
    order, as written to durable storage.
    """
    model_config = ConfigDict(from_attributes=True)

    interview_id: str
    question_id: str
    question_text: str = ""
    question_format: QuestionFormat = QuestionFormat.SHORT_DESCRIPTION
    question_order: int = Field(default=1, ge=1)
    answer: str = ""
    justification: str = ""
    score: Optional[int] = None
    notes: str = ""
    time_spent_seconds: int = 0
    flagged: bool = False
    is_completed: bool = False


class ProgressRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    interview_id: str
    template_id: Optional[str] = None
    current_question_index: int = 0
    responses: List[ResponseRecord] = Field(default_factory=list)
    total_time_spent_seconds: int = 0
    status: ProgressStatus = ProgressStatus.IN_PROGRESS
