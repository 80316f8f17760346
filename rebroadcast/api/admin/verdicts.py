from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from rebroadcast.admission.mute import populate_muted
from rebroadcast.admission.pipeline import AdmissionPipeline
from rebroadcast.api.deps import get_pipeline, require_internal_key
from rebroadcast.core.errors import MutedListError

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_internal_key)])


@router.get("/verdicts")
async def list_verdicts(
    limit: int = Query(default=50, ge=1, le=1000),
    pipeline: AdmissionPipeline = Depends(get_pipeline),
):
    verdicts = pipeline.verdict_log.list()
    return {"ok": True, "verdicts": verdicts[-limit:]}


@router.get("/stats")
async def stats(pipeline: AdmissionPipeline = Depends(get_pipeline)):
    return {"ok": True, "reasons": pipeline.verdict_log.counts(), "caches": pipeline.caches.sizes()}


@router.post("/mutes/refresh")
async def refresh_mutes(pipeline: AdmissionPipeline = Depends(get_pipeline)):
    # en caliente un fallo de la API no es fatal: se queda la lista anterior
    try:
        loaded = await populate_muted(pipeline.collaborators.muted, pipeline.caches.muted_ids, replace=True)
    except MutedListError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"ok": True, "muted": loaded}
