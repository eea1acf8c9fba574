import asyncio
import logging
from typing import List, Optional
from fastapi import APIRouter, Header, Request
from pydantic import Field
from compliance.config import get_settings
from compliance.models import CamelModel, FoodSummary, ServingSize, ValidationRequest
from compliance.orchestrator import ValidationOrchestrator
from compliance.legacy_validator import validate_label_basic
from compliance.i18n.messages import parse_accept_language

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/labels", tags=["labels"])

DISCONNECT_POLL_SECONDS = 0.25


class BasicValidationRequest(CamelModel):
    label_text: str = Field(..., min_length=1)
    declared_allergens: List[str] = Field(default_factory=list)
    serving_size: Optional[ServingSize] = None
    claim_texts: List[str] = Field(default_factory=list)
    context_foods: List[FoodSummary] = Field(default_factory=list)


async def _watch_disconnect(request: Request, cancel_event: asyncio.Event) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected; cancelling reference food lookup")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post("/validate")
async def validate(body: ValidationRequest, request: Request):
    """Full validation: allergens, serving size, claims, market rules."""
    orchestrator = ValidationOrchestrator(
        rule_engine=getattr(request.app.state, "rule_engine", None),
        food_search=getattr(request.app.state, "food_search", None),
    )
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        report = await orchestrator.validate(body, cancel_event=cancel_event)
    finally:
        watcher.cancel()
    return report.to_json_dict()


@router.post("/validate/basic")
async def validate_basic(body: BasicValidationRequest, accept_language: Optional[str] = Header(None)):
    """Basic validation with messages in the Accept-Language locale (en or fr)."""
    locale = parse_accept_language(accept_language, default=get_settings().default_locale)
    report = validate_label_basic(
        body.label_text,
        declared_allergens=body.declared_allergens,
        serving_size=body.serving_size,
        claim_texts=body.claim_texts,
        context_foods=body.context_foods,
        locale=locale,
    )
    return report.to_json_dict()
