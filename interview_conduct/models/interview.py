from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from datetime import datetime
from uuid import uuid4

from interview_conduct.core.database import Base


def gen_id():
    return str(uuid4())


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(String, primary_key=True, index=True, default=gen_id)
    job_application_id = Column(String, ForeignKey("job_applications.id"), index=True)
    template_id = Column(String, ForeignKey("interview_templates.id"), nullable=True)

    type = Column(String)      # Phone Screen | Technical | Final | ...
    stage = Column(String, nullable=True)
    status = Column(String, default="Scheduled")

    scheduled_at = Column(DateTime, nullable=True)
    duration_minutes = Column(Integer, default=60)
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)

    overall_rating = Column(Integer, nullable=True)
    result = Column(String, nullable=True)  # Pass | Fail
    recommendation = Column(String, nullable=True)
    next_steps = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
