"""
Pydantic request/response models shared across route modules.
"""

from typing import Optional

from pydantic import BaseModel, Field

from config import MAX_IMAGE_BASE64_CHARS, MAX_IMAGE_SIDE


class ImagePayload(BaseModel):
    """Raw pixels, base64 encoded, row-major with interleaved channels."""
    data_base64: str = Field(max_length=MAX_IMAGE_BASE64_CHARS)
    width: int = Field(gt=0, le=MAX_IMAGE_SIDE)
    height: int = Field(gt=0, le=MAX_IMAGE_SIDE)
    channels: int = 3


class ProjectContextBody(BaseModel):
    project_type: Optional[str] = None
    budget: Optional[float] = None
    room_type: Optional[str] = None
    preferences: list[str] = []


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=10_000)
    image: Optional[ImagePayload] = None
    context: Optional[ProjectContextBody] = None
    role: Optional[str] = None
    stream: bool = True


class ModificationBody(BaseModel):
    type: str
    target_index: Optional[int] = None
    parameters: dict = {}
    preserve_structural: bool = False


class ModificationsRequest(BaseModel):
    modifications: list[ModificationBody] = Field(min_length=1)
    image: Optional[ImagePayload] = None


class IntentRequest(BaseModel):
    utterance: str


class DecisionRequest(BaseModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=1)
    roles: list[str] = Field(min_length=1)
    context: Optional[ProjectContextBody] = None
