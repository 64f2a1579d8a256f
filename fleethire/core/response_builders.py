from typing import Optional
from fleethire.core.enums import HOW_HEARD_OPTIONS
from fleethire.schemas.catalog import Catalog, CatalogOptions
from fleethire.schemas.quote import DraftOut, DraftSession, QuoteCalcResponse, QuoteDraft, QuoteRecord, SubmitOut
from fleethire.services.totals import calculate_totals


def build_draft_response(session: DraftSession) -> DraftOut:
    return DraftOut(
        session_id=session.session_id,
        draft=session.draft,
        totals=calculate_totals(session.draft.line_items),
    )


def build_calc_response(draft: QuoteDraft) -> QuoteCalcResponse:
    return QuoteCalcResponse(draft=draft, totals=calculate_totals(draft.line_items))


def build_options_response(catalog: Catalog) -> CatalogOptions:
    return CatalogOptions(
        vehicle_types=catalog.vehicle_types,
        locations=catalog.locations,
        insurance_options=catalog.insurance_options,
        km_options=catalog.km_options,
        requirement_options=catalog.requirement_options,
        how_heard_options=list(HOW_HEARD_OPTIONS),
    )


def build_submit_response(record: QuoteRecord, quote_id: Optional[str] = None) -> SubmitOut:
    return SubmitOut(
        quote_id=quote_id,
        quote_number=record.quote_number,
        customer_email=record.customer_email,
        total=record.total,
        valid_until=record.valid_until,
        status=record.status,
    )
