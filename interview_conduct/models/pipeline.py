from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from datetime import datetime

from interview_conduct.core.database import Base
from interview_conduct.models.interview import gen_id


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(String, primary_key=True, index=True, default=gen_id)
    job_id = Column(String, index=True)

    stage = Column(String, default="")
    current_stage_id = Column(String, ForeignKey("pipeline_stages.id"), nullable=True)
    last_activity_at = Column(DateTime, default=datetime.utcnow)


class PipelineStage(Base):
    __tablename__ = "pipeline_stages"

    id = Column(String, primary_key=True, index=True, default=gen_id)
    job_id = Column(String, index=True)

    name = Column(String)
    order = Column(Integer)


class StageMovement(Base):
    __tablename__ = "stage_movements"

    id = Column(String, primary_key=True, index=True, default=gen_id)
    application_id = Column(String, ForeignKey("job_applications.id"), index=True)

    from_stage_id = Column(String, nullable=True)
    to_stage_id = Column(String)
    reason = Column(String)  # manual_move | interview_completed
    rating = Column(Integer, nullable=True)
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
