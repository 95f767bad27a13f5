from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from interview_conduct.schemas.session import QuestionResponse, SessionState
from interview_conduct.schemas.template import Question


class ResponseUpdate(BaseModel):
    """Partial edit of the current question's response."""
    answer: Optional[str] = None
    score: Optional[int] = None
    clear_score: bool = False
    notes: Optional[str] = None
    toggle_flag: bool = False


class ConductStateResponse(BaseModel):
    interview_id: str
    session: SessionState
    elapsed: str
    question_count: int
    current_question: Optional[Question] = None
    current_response: Optional[QuestionResponse] = None
    ready_to_evaluate: bool = False
    notifications: List[Dict[str, str]] = Field(default_factory=list)


class FinalizeResponse(BaseModel):
    interview_id: str
    status: str
    result: Optional[str] = None
    overall_rating: Optional[int] = None
    average_score: Optional[float] = None
    persisted_question_ids: List[str]
    failed_question_ids: List[str]
    progress_saved: bool
    advanced: bool = False
    advanced_to: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
