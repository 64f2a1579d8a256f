"""Quote builder endpoints: draft sessions, events, preview and submission"""
import json
import hashlib
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException

from fleethire.core.config import settings
from fleethire.core.errors import CatalogUnavailableError, QuoteValidationError, SubmissionError, check_not_found
from fleethire.core.metrics import cache_hits, cache_misses, quote_events, quote_submissions
from fleethire.core.redis import get_redis
from fleethire.core.response_builders import (
    build_calc_response,
    build_draft_response,
    build_options_response,
    build_submit_response,
)
from fleethire.schemas.catalog import Catalog, CatalogOptions
from fleethire.schemas.events import EventRequest, QuoteCalcRequest
from fleethire.schemas.quote import DraftOut, DraftSession, QuoteCalcResponse, QuotePreviewOut, SubmitOut
from fleethire.services.catalog import CatalogSource, get_catalog_source
from fleethire.services.draft_store import DraftStore, get_draft_store
from fleethire.services.email import build_quote_email
from fleethire.services.gateway import QuoteGateway, get_quote_gateway
from fleethire.services.ledger import apply_event, apply_events, new_draft
from fleethire.services.submission import build_quote_record, validate_for_submission
from fleethire.utils.idempotency import get_submission, remember_submission

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def _generate_cache_key(req: QuoteCalcRequest, catalog: Catalog) -> str:
    params = {"events": req.model_dump(mode="json")["events"], "catalog": catalog.model_dump(mode="json")}
    params_str = json.dumps(params, sort_keys=True)
    return f"quote:{hashlib.sha256(params_str.encode()).hexdigest()}"


async def _load_catalog(source: CatalogSource) -> Catalog:
    try:
        return await source.load()
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


async def _load_session(store: DraftStore, session_id: str) -> DraftSession:
    session = await store.get(session_id)
    check_not_found(session, "Quote draft", session_id)
    return session


def _validate(session: DraftSession) -> None:
    try:
        validate_for_submission(session.draft)
    except QuoteValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)


@router.post("/drafts", response_model=DraftOut, status_code=201)
async def create_draft(
    store: DraftStore = Depends(get_draft_store),
    catalog_source: CatalogSource = Depends(get_catalog_source),
):
    catalog = await _load_catalog(catalog_source)
    session = await store.create(new_draft(catalog), catalog)
    return build_draft_response(session)


@router.get("/drafts/{session_id}", response_model=DraftOut)
async def get_draft(session_id: str, store: DraftStore = Depends(get_draft_store)):
    session = await _load_session(store, session_id)
    return build_draft_response(session)


@router.post("/drafts/{session_id}/events", response_model=DraftOut)
async def apply_draft_event(
    session_id: str,
    payload: EventRequest,
    store: DraftStore = Depends(get_draft_store),
):
    session = await _load_session(store, session_id)
    event = payload.event

    draft = apply_event(session.draft, event, session.catalog)
    session = session.model_copy(update={"draft": draft})
    await store.save(session)
    quote_events.labels(event=event.type).inc()

    return build_draft_response(session)


@router.get("/drafts/{session_id}/options", response_model=CatalogOptions)
async def get_draft_options(session_id: str, store: DraftStore = Depends(get_draft_store)):
    session = await _load_session(store, session_id)
    return build_options_response(session.catalog)


@router.get("/drafts/{session_id}/preview", response_model=QuotePreviewOut)
async def preview_draft(session_id: str, store: DraftStore = Depends(get_draft_store)):
    session = await _load_session(store, session_id)
    _validate(session)

    record = build_quote_record(session.draft)
    return QuotePreviewOut(record=record, email=build_quote_email(record))


@router.post("/drafts/{session_id}/submit", response_model=SubmitOut)
async def submit_draft(
    session_id: str,
    idempotency_key: Optional[str] = Header(None),
    store: DraftStore = Depends(get_draft_store),
    gateway: QuoteGateway = Depends(get_quote_gateway),
):
    if idempotency_key:
        prev = await get_submission(session_id, idempotency_key)
        if prev:
            return prev

    session = await _load_session(store, session_id)
    _validate(session)

    record = build_quote_record(session.draft)
    try:
        saved = await gateway.save_quote(record)
        quote_id = str(saved["id"]) if saved.get("id") is not None else None
        await gateway.send_email(build_quote_email(record, quote_id))
    except SubmissionError as e:
        quote_submissions.labels(status="failed").inc()
        raise HTTPException(status_code=502, detail=str(e))

    quote_submissions.labels(status="sent").inc()
    try:
        await store.delete(session_id)
    except HTTPException:
        logger.warning(f"Draft {session_id} kept after sending quote {record.quote_number}")
    logger.info(f"Quote {record.quote_number} sent to {record.customer_email}")

    out = build_submit_response(record, quote_id)
    if idempotency_key:
        await remember_submission(session_id, idempotency_key, out)
    return out


@router.delete("/drafts/{session_id}")
async def discard_draft(session_id: str, store: DraftStore = Depends(get_draft_store)):
    await _load_session(store, session_id)
    await store.delete(session_id)
    return {"deleted": True}


@router.post("/calc", response_model=QuoteCalcResponse)
async def calc_quote(
    req: QuoteCalcRequest,
    catalog_source: CatalogSource = Depends(get_catalog_source),
):
    catalog = await _load_catalog(catalog_source)
    cache_key = _generate_cache_key(req, catalog)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                cache_hits.labels(cache_key="quote_calc").inc()
                return QuoteCalcResponse.model_validate_json(cached)
            cache_misses.labels(cache_key="quote_calc").inc()
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")

    result = build_calc_response(apply_events(new_draft(catalog), req.events, catalog))

    if redis is not None:
        try:
            await redis.set(cache_key, result.model_dump_json(), ex=settings.PRICE_CACHE_TTL)
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result
