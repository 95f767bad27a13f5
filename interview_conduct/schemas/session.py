from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional

from interview_conduct.utils.enums import SessionStatus


class QuestionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    answer: str = ""
    score: Optional[int] = None
    notes: str = ""
    time_spent_seconds: int = 0
    flagged: bool = False

    def is_empty(self) -> bool:
        return not self.answer.strip() and self.score is None and not self.notes.strip()


class SessionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: SessionStatus = SessionStatus.NOT_STARTED
    current_question_index: int = 0
    start_time: Optional[datetime] = None
    total_time_spent_seconds: int = 0
