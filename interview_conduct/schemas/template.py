from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

from interview_conduct.utils.enums import QuestionFormat


class RatingScale(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int = 1
    max: int = 5
    labels: Dict[str, str] = Field(default_factory=dict)


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    question: str
    format: QuestionFormat = QuestionFormat.SHORT_DESCRIPTION
    order: Optional[int] = None
    rating_scale: Optional[RatingScale] = None
    max_characters: Optional[int] = None
    scoring_criteria: Optional[str] = None


class Template(BaseModel):
    """
    Read-only, ordered question list supplied when a session opens.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    questions: List[Question] = Field(default_factory=list)
