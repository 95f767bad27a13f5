from fastapi import APIRouter, Depends, HTTPException, Request

from interview_conduct.core.errors import (
    NotFoundError,
    PersistenceError,
    SessionStateError,
    ValidationError,
)
from interview_conduct.schemas.conduct import (
    ConductStateResponse,
    FinalizeResponse,
    ResponseUpdate,
)
from interview_conduct.schemas.evaluation import Evaluation
from interview_conduct.services.session_controller import SessionController
from interview_conduct.services.session_registry import SessionRegistry
from interview_conduct.services.session_timer import format_elapsed
from interview_conduct.utils.enums import SessionStatus

router = APIRouter()


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_controller(
    interview_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> SessionController:
    try:
        return registry.get(interview_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def build_state(
    controller: SessionController,
    registry: SessionRegistry,
    ready: bool = False,
) -> ConductStateResponse:
    session = controller.snapshot()
    notifications = registry.notifications(controller.interview.id)
    return ConductStateResponse(
        interview_id=controller.interview.id,
        session=session,
        elapsed=format_elapsed(session.total_time_spent_seconds),
        question_count=controller.state.question_count,
        current_question=controller.state.current_question,
        current_response=controller.current_response(),
        ready_to_evaluate=ready or session.status == SessionStatus.COMPLETED,
        notifications=notifications.drain() if notifications else [],
    )


# Session lifecycle
@router.post("/interviews/{interview_id}/conduct", response_model=ConductStateResponse)
async def open_conduct_session(
    interview_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    try:
        controller = await registry.open(interview_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_state(controller, registry)


@router.get("/interviews/{interview_id}/conduct", response_model=ConductStateResponse)
async def get_conduct_session(
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    return build_state(controller, registry)


@router.delete("/interviews/{interview_id}/conduct")
async def close_conduct_session(
    interview_id: str,
    registry: SessionRegistry = Depends(get_registry),
):
    return {"interview_id": interview_id, "closed": registry.close(interview_id)}


@router.post("/interviews/{interview_id}/conduct/start", response_model=ConductStateResponse)
async def start_conduct_session(
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    try:
        await controller.start()
    except SessionStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_state(controller, registry)


@router.post("/interviews/{interview_id}/conduct/pause", response_model=ConductStateResponse)
async def pause_conduct_session(
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    try:
        await controller.pause()
    except SessionStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_state(controller, registry)


@router.post("/interviews/{interview_id}/conduct/resume", response_model=ConductStateResponse)
async def resume_conduct_session(
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    try:
        controller.resume()
    except SessionStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_state(controller, registry)


# Navigation
@router.post("/interviews/{interview_id}/conduct/next", response_model=ConductStateResponse)
async def next_question(
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    ready = controller.next()
    return build_state(controller, registry, ready=ready)


@router.post("/interviews/{interview_id}/conduct/previous", response_model=ConductStateResponse)
async def previous_question(
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    controller.previous()
    return build_state(controller, registry)


@router.post("/interviews/{interview_id}/conduct/goto/{index}", response_model=ConductStateResponse)
async def go_to_question(
    index: int,
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    controller.go_to(index)
    return build_state(controller, registry)


@router.patch("/interviews/{interview_id}/conduct/response", response_model=ConductStateResponse)
async def update_current_response(
    update: ResponseUpdate,
    controller: SessionController = Depends(get_controller),
    registry: SessionRegistry = Depends(get_registry),
):
    if update.answer is not None:
        controller.set_answer(update.answer)
    if update.score is not None or update.clear_score:
        controller.set_score(None if update.clear_score else update.score)
    if update.notes is not None:
        controller.set_notes(update.notes)
    if update.toggle_flag:
        controller.toggle_flag()
    return build_state(controller, registry)


# Persistence
@router.post("/interviews/{interview_id}/conduct/progress")
async def save_conduct_progress(controller: SessionController = Depends(get_controller)):
    try:
        record = await controller.save_progress()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return record


@router.post("/interviews/{interview_id}/conduct/evaluation", response_model=FinalizeResponse)
async def submit_conduct_evaluation(
    evaluation: Evaluation,
    controller: SessionController = Depends(get_controller),
):
    try:
        outcome = await controller.submit_evaluation(evaluation)
    except (ValidationError, SessionStateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=502, detail=f"Submission failed: {e}")

    advancement = outcome.advancement
    advanced = bool(advancement and advancement.advanced)
    return FinalizeResponse(
        interview_id=outcome.interview.id,
        status=outcome.interview.status,
        result=outcome.interview.result,
        overall_rating=outcome.interview.overall_rating,
        average_score=outcome.average_score,
        persisted_question_ids=outcome.persisted_question_ids,
        failed_question_ids=outcome.failed_question_ids,
        progress_saved=outcome.progress_saved,
        advanced=advanced,
        advanced_to=advancement.to_stage.name if advanced else None,
        warnings=outcome.warnings,
    )
