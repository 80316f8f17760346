from __future__ import annotations

from fastapi import APIRouter, Depends

from rebroadcast.admission.pipeline import AdmissionPipeline
from rebroadcast.api.deps import get_pipeline

router = APIRouter()


@router.get("/health")
async def health(pipeline: AdmissionPipeline = Depends(get_pipeline)):
    return {
        "ok": True,
        "pending": pipeline.pending,
        "caches": pipeline.caches.sizes(),
    }
