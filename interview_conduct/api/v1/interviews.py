from fastapi import APIRouter, Depends, HTTPException, Request

from interview_conduct.core.errors import NotFoundError
from interview_conduct.services.gateway import InterviewGateway

router = APIRouter()


def get_gateway(request: Request) -> InterviewGateway:
    return request.app.state.sessions.gateway


@router.get("/interviews/{interview_id}/progress")
async def get_interview_progress(
    interview_id: str,
    gateway: InterviewGateway = Depends(get_gateway)
):
    progress = await gateway.get_progress(interview_id)
    if not progress:
        return {"message": "No progress saved"}

    return progress.model_dump(mode="json")


@router.get("/interviews/{interview_id}/responses")
async def get_interview_responses(
    interview_id: str,
    gateway: InterviewGateway = Depends(get_gateway)
):
    try:
        await gateway.get_interview(interview_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    responses = await gateway.list_responses(interview_id)
    return [r.model_dump(mode="json") for r in responses]
