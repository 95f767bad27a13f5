"""
Automatic pipeline advancement after a completed interview.

An interview qualifies when its type is on the allow-list and it does not
carry an explicit rating below the threshold. A qualifying interview moves
its application from the current stage to the next one by stage order.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from interview_conduct.core.config import settings
from interview_conduct.core.errors import StageAdvancementError
from interview_conduct.schemas.interview import Interview, JobApplication, PipelineStage
from interview_conduct.services.gateway import InterviewGateway

logger = logging.getLogger(__name__)


@dataclass
class AdvancementResult:
    advanced: bool
    reason: str
    from_stage: Optional[PipelineStage] = None
    to_stage: Optional[PipelineStage] = None
    note: str = ""
    error: Optional[str] = None


def stage_matches(stage_name: str, current: str) -> bool:
    a, b = stage_name.strip().lower(), current.strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def find_current_stage(stages: List[PipelineStage], current: str) -> Optional[int]:
    for position, stage in enumerate(stages):
        if stage_matches(stage.name, current):
            return position
    return None


def advancement_note(interview: Interview, from_stage: PipelineStage, to_stage: PipelineStage) -> str:
    rating = (
        f"an overall rating of {interview.overall_rating}/5"
        if interview.overall_rating is not None
        else "no overall rating"
    )
    return (
        f"Automatically moved from '{from_stage.name}' to '{to_stage.name}' after "
        f"{interview.type} interview {interview.id} was completed with {rating}."
    )


class StageAdvancementPolicy:
    def __init__(
        self,
        gateway: InterviewGateway,
        min_rating: Optional[int] = None,
        interview_types: Optional[Iterable[str]] = None,
    ):
        self.gateway = gateway
        self.min_rating = settings.ADVANCEMENT_MIN_RATING if min_rating is None else min_rating
        self.interview_types = set(
            settings.ADVANCEMENT_INTERVIEW_TYPES if interview_types is None else interview_types
        )

    def is_eligible(self, interview: Interview) -> Optional[str]:
        """Returns the reason an interview is ineligible, or None if it qualifies."""
        if interview.overall_rating is not None and interview.overall_rating < self.min_rating:
            return f"overall rating {interview.overall_rating} is below {self.min_rating}"
        if interview.type not in self.interview_types:
            return f"interview type '{interview.type}' does not advance automatically"
        return None

    def decide(
        self,
        interview: Interview,
        application: JobApplication,
        stages: List[PipelineStage],
    ) -> AdvancementResult:
        ineligible = self.is_eligible(interview)
        if ineligible:
            return AdvancementResult(advanced=False, reason=ineligible)

        ordered = sorted(stages, key=lambda s: s.order)
        position = find_current_stage(ordered, application.stage)
        if position is None:
            return AdvancementResult(
                advanced=False,
                reason=f"no pipeline stage matches '{application.stage}'",
            )
        if position == len(ordered) - 1:
            return AdvancementResult(
                advanced=False,
                reason="application is already in the last stage",
                from_stage=ordered[position],
            )

        from_stage, to_stage = ordered[position], ordered[position + 1]
        return AdvancementResult(
            advanced=True,
            reason="interview qualifies for automatic advancement",
            from_stage=from_stage,
            to_stage=to_stage,
            note=advancement_note(interview, from_stage, to_stage),
        )

    async def apply(self, interview: Interview) -> AdvancementResult:
        """Decide and, when eligible, move the application. Never raises."""
        try:
            ineligible = self.is_eligible(interview)
            if ineligible:
                logger.info("Interview %s does not advance its application: %s", interview.id, ineligible)
                return AdvancementResult(advanced=False, reason=ineligible)

            application = await self.gateway.get_job_application(interview.job_application_id)
            stages = await self.gateway.list_pipeline_stages(application)
            result = self.decide(interview, application, stages)
            if not result.advanced:
                logger.info("Application %s not advanced: %s", application.id, result.reason)
                return result

            try:
                await self.gateway.move_application_stage(
                    application.id,
                    result.to_stage.id,
                    interview.overall_rating,
                    result.note,
                )
            except Exception as exc:
                raise StageAdvancementError(
                    f"Could not move application {application.id} to {result.to_stage.name}"
                ) from exc

            logger.info(
                "Application %s advanced from %s to %s",
                application.id,
                result.from_stage.name,
                result.to_stage.name,
            )
            return result
        except Exception as exc:
            logger.exception("Stage advancement failed for interview %s", interview.id)
            return AdvancementResult(advanced=False, reason="stage advancement failed", error=str(exc))
