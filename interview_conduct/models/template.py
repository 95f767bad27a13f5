from sqlalchemy import Column, String, Integer, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship

from interview_conduct.core.database import Base
from interview_conduct.models.interview import gen_id


class InterviewTemplate(Base):
    __tablename__ = "interview_templates"

    id = Column(String, primary_key=True, index=True, default=gen_id)
    name = Column(String)

    questions = relationship(
        "TemplateQuestion",
        back_populates="template",
        order_by="TemplateQuestion.position",
    )


class TemplateQuestion(Base):
    __tablename__ = "template_questions"

    id = Column(Integer, primary_key=True, index=True)
    template_id = Column(String, ForeignKey("interview_templates.id"), index=True)
    position = Column(Integer)  # list position, independent of the authored order

    question = Column(Text)
    format = Column(String)
    order = Column(Integer, nullable=True)
    rating_scale = Column(JSON, nullable=True)  # {"min": 1, "max": 5, "labels": {...}}
    max_characters = Column(Integer, nullable=True)
    scoring_criteria = Column(Text, nullable=True)

    template = relationship("InterviewTemplate", back_populates="questions")
