from __future__ import annotations

import json
from typing import List

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from rebroadcast.admission.pipeline import AdmissionPipeline
from rebroadcast.admission.schema import PostEvent, WebhookEnvelope
from rebroadcast.api.deps import get_pipeline, get_settings
from rebroadcast.core.logging import log_event
from rebroadcast.core.security import crc_response_token, verify_webhook_signature
from rebroadcast.settings import Settings

router = APIRouter()


@router.get("/events")
async def crc_challenge(
    crc_token: str = Query(..., min_length=1),
    settings: Settings = Depends(get_settings),
):
    if not settings.WEBHOOK_SECRET:
        raise HTTPException(status_code=500, detail="WEBHOOK_SECRET not set")
    return {"response_token": crc_response_token(crc_token, settings.WEBHOOK_SECRET)}


@router.post("/events", status_code=202)
async def inbound_events(
    request: Request,
    signature: str = Header(default="", alias="x-twitter-webhooks-signature"),
    pipeline: AdmissionPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
):
    raw_bytes = await request.body()

    # límite de tamaño del body
    if len(raw_bytes) > settings.MAX_BODY_BYTES:
        raise HTTPException(status_code=413, detail="Payload too large")

    if settings.WEBHOOK_VERIFY_SIGNATURE:
        if not verify_webhook_signature(raw_bytes, signature, settings.WEBHOOK_SECRET):
            raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(raw_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Expected a JSON object")

    try:
        if "tweet_create_events" in payload:
            events: List[PostEvent] = WebhookEnvelope.model_validate(payload).tweet_create_events
        elif "id" in payload:
            events = [PostEvent.model_validate(payload)]
        else:
            # otros tipos de evento del webhook (favorites, follows...) no nos interesan
            events = []
    except ValidationError as e:
        return JSONResponse(status_code=422, content={"detail": json.loads(e.json())})

    # una task por evento; no esperamos el verdict
    for event in events:
        pipeline.dispatch(event)

    log_event("events_received", count=len(events))
    return {"accepted": len(events)}
