from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, ForeignKey, JSON
from datetime import datetime

from interview_conduct.core.database import Base


class InterviewProgress(Base):
    __tablename__ = "interview_progress"

    interview_id = Column(String, ForeignKey("interviews.id"), primary_key=True)
    template_id = Column(String, nullable=True)

    current_question_index = Column(Integer, default=0)
    responses = Column(JSON, default=list)
    total_time_spent_seconds = Column(Integer, default=0)
    status = Column(String, default="in_progress")  # in_progress | completed

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class InterviewResponse(Base):
    __tablename__ = "interview_responses"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(String, ForeignKey("interviews.id"), index=True)

    question_id = Column(String, index=True)
    question_text = Column(Text)
    question_format = Column(String)
    question_order = Column(Integer)

    answer = Column(Text, default="")
    justification = Column(Text, default="")
    score = Column(Integer, nullable=True)
    notes = Column(Text, default="")
    time_spent_seconds = Column(Integer, default=0)
    flagged = Column(Boolean, default=False)
    is_completed = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
