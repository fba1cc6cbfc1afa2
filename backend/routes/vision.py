"""Room analysis and modification planning endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from models import ImagePayload, ModificationsRequest
from routes.deps import get_studio, require_ready, to_image_buffer
from vision.modifications import ModificationRequest

router = APIRouter()


@router.post("/api/vision/analyze", dependencies=[Depends(require_ready)])
async def analyze(req: ImagePayload, studio=Depends(get_studio)):
    analysis = await studio.analyze_image(to_image_buffer(req))
    return analysis.to_dict()


@router.post("/api/vision/modifications", dependencies=[Depends(require_ready)])
async def modifications(req: ModificationsRequest, studio=Depends(get_studio)):
    analysis = None
    if req.image is not None:
        analysis = await studio.analyze_image(to_image_buffer(req.image))
    requests = [
        ModificationRequest(
            type=m.type,
            target_index=m.target_index,
            parameters=dict(m.parameters),
            preserve_structural=m.preserve_structural,
        )
        for m in req.modifications
    ]
    try:
        plan = studio.plan_modifications(requests, analysis)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return plan.to_dict()
