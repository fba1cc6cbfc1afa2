"""Per-role conversation history endpoints."""

from fastapi import APIRouter, Depends

from routes.deps import get_studio, parse_role

router = APIRouter()


@router.get("/api/conversations/{role}")
def get_conversation(role: str, studio=Depends(get_studio)):
    agent_role = parse_role(role)
    return {
        "role": agent_role.value,
        "messages": [m.to_dict() for m in studio.memory.get_recent(agent_role)],
    }


@router.delete("/api/conversations/{role}")
def clear_conversation(role: str, studio=Depends(get_studio)):
    agent_role = parse_role(role)
    studio.memory.clear(agent_role)
    return {"status": "cleared", "role": agent_role.value}
