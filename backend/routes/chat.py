"""Chat endpoint — one collaborative turn, streamed as NDJSON or returned whole."""

import json
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from models import ChatRequest
from routes.deps import get_studio, parse_role, require_ready, to_image_buffer, to_project_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/chat", dependencies=[Depends(require_ready)])
async def chat(req: ChatRequest, studio=Depends(get_studio)):
    requested = parse_role(req.role, status_code=404) if req.role else None
    image = to_image_buffer(req.image) if req.image else None
    stream = await studio.chat(req.message, image=image,
                               context=to_project_context(req.context),
                               requested_role=requested)

    if not req.stream:
        result = await stream.collect()
        return result.to_dict() if result else None

    async def ndjson():
        try:
            async for chunk in stream:
                yield json.dumps({"type": "chunk", **chunk.to_dict()}) + "\n"
            result = stream.result
            yield json.dumps({"type": "result", "data": result.to_dict() if result else None}) + "\n"
        finally:
            if not stream.completed:
                logger.info("Chat stream closed before completion; nothing committed")
                await stream.aclose()

    return StreamingResponse(ndjson(), media_type="application/x-ndjson")
