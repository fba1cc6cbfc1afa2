"""Collaborative decision endpoint."""

from fastapi import APIRouter, Depends, HTTPException

from models import DecisionRequest
from routes.deps import get_studio, parse_role, require_ready, to_project_context

router = APIRouter()


@router.post("/api/decisions", dependencies=[Depends(require_ready)])
async def decide(req: DecisionRequest, studio=Depends(get_studio)):
    roles = [parse_role(r, status_code=404) for r in req.roles]
    try:
        decision = await studio.deliberate(
            req.question, req.options, roles, to_project_context(req.context),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return decision.to_dict()
