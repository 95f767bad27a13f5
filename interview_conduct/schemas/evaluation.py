from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from interview_conduct.utils.enums import Recommendation


class Evaluation(BaseModel):
    """
    The interviewer's holistic verdict. Score and recommendation are optional
    here because the form may be submitted half-filled; the aggregator rejects
    that case before doing any I/O.
    """
    overall_score: Optional[int] = Field(default=None, ge=1, le=5)
    recommendation: Optional[Recommendation] = None
    overall_notes: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    next_steps: str = ""
    completed_at: Optional[datetime] = None
