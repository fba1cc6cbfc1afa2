"""Shared route dependencies: studio lookup, readiness, and body conversion."""

import base64
import binascii
from typing import Optional

from fastapi import HTTPException, Request

from models import ImagePayload, ProjectContextBody
from orchestration.context import ProjectContext
from orchestration.messages import AgentRole
from vision.types import ImageBuffer


def get_studio(request: Request):
    """Return the RemodelStudio instance from app state."""
    return request.app.state.studio


def require_ready(request: Request):
    """Dependency that returns 503 if the studio has not started yet."""
    if not get_studio(request).ready:
        raise HTTPException(status_code=503, detail="Studio is still initializing")


def parse_role(value: str, status_code: int = 404) -> AgentRole:
    try:
        return AgentRole.parse(value)
    except ValueError:
        raise HTTPException(status_code=status_code, detail=f"Unknown agent role: {value}") from None


def to_image_buffer(payload: ImagePayload) -> ImageBuffer:
    try:
        data = base64.b64decode(payload.data_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail="image.data_base64 is not valid base64") from None
    return ImageBuffer(data=data, width=payload.width, height=payload.height,
                       channels=payload.channels)


def to_project_context(body: Optional[ProjectContextBody]) -> ProjectContext:
    if body is None:
        return ProjectContext()
    return ProjectContext(
        project_type=body.project_type,
        budget=body.budget,
        room_type=body.room_type,
        preferences=list(body.preferences),
    )
