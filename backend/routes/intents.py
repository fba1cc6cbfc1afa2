"""Command parsing and voice guidance endpoints."""

from fastapi import APIRouter, Depends

from intents.guidance import guidance_prompt
from models import IntentRequest
from routes.deps import get_studio

router = APIRouter()


@router.post("/api/intent")
def parse_intent(req: IntentRequest, studio=Depends(get_studio)):
    intent = studio.parse_intent(req.utterance)
    return {"intent": intent.to_dict() if intent else None}


@router.get("/api/guidance/{stage}")
def guidance(stage: str):
    return {"stage": stage, "prompt": guidance_prompt(stage)}
