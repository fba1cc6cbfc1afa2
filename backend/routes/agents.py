"""Agent roster endpoint."""

from fastapi import APIRouter, Depends

from routes.deps import get_studio, require_ready

router = APIRouter()


@router.get("/api/agents", dependencies=[Depends(require_ready)])
def list_agents(studio=Depends(get_studio)):
    return {"agents": studio.agents_overview()}
