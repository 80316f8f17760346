from __future__ import annotations

from fastapi import Header, HTTPException, Request

from rebroadcast.admission.pipeline import AdmissionPipeline
from rebroadcast.settings import Settings


def get_pipeline(request: Request) -> AdmissionPipeline:
    return request.app.state.pipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_internal_key(request: Request, x_api_key: str = Header(default="", alias="x-api-key")) -> None:
    settings = get_settings(request)
    if not settings.INTERNAL_API_KEY:
        raise HTTPException(status_code=500, detail="INTERNAL_API_KEY not set")
    if x_api_key != settings.INTERNAL_API_KEY:
        raise HTTPException(status_code=401, detail="Unauthorized")
