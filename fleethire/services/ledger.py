"""Quote draft reducer.

Every line item carries a ``LineItemCategory`` tag naming the selection that
owns it. An event only rewrites the items of the categories it affects; all
other items are carried over as the same objects, in the same order. A
replaced item keeps its position and a new item is appended.
"""
import logging
from typing import Dict, Iterable, List, Optional

from fleethire.core.enums import LineItemKind, LocationRole, PricingRuleType
from fleethire.schemas.catalog import Catalog, Location, PricingRule
from fleethire.schemas.events import (
    SetCustomer,
    SetDetails,
    SetDuration,
    SetInsurance,
    SetKmOption,
    SetLocation,
    SetSchedule,
    SetVehicle,
    ToggleRequirement,
)
from fleethire.schemas.quote import LineItem, LineItemCategory, QuoteDraft
from fleethire.services.duration import calculate_hire_duration
from fleethire.services.pricing import resolve_daily_rate

logger = logging.getLogger(__name__)

VEHICLE = LineItemCategory(kind=LineItemKind.VEHICLE)
INSURANCE = LineItemCategory(kind=LineItemKind.INSURANCE)

LOCATION_FIELDS = {
    LocationRole.PICKUP: "pickup_location",
    LocationRole.DROPOFF: "dropoff_location",
}


def requirement_category(rule_id: str) -> LineItemCategory:
    return LineItemCategory(kind=LineItemKind.REQUIREMENT, ref=rule_id)


def transport_category(role: LocationRole) -> LineItemCategory:
    return LineItemCategory(kind=LineItemKind.TRANSPORT_FEE, ref=role.value)


def find_item(items: Iterable[LineItem], category: LineItemCategory) -> Optional[LineItem]:
    return next((item for item in items if item.category == category), None)


def _index_of(items: List[LineItem], category: LineItemCategory) -> int:
    for index, item in enumerate(items):
        if item.category == category:
            return index
    return -1


def _put(items: List[LineItem], category: LineItemCategory, item: Optional[LineItem]) -> List[LineItem]:
    """Set the item owned by ``category``; ``None`` removes it."""
    items = list(items)
    index = _index_of(items, category)
    if index == -1:
        if item is not None:
            items.append(item)
    elif item is None:
        del items[index]
    elif items[index] != item:
        items[index] = item
    return items


def _per_day(description: str, unit_price: float, days: int, category: LineItemCategory) -> LineItem:
    return LineItem(
        description=description,
        quantity=days,
        unit_price=unit_price,
        total=unit_price * days,
        category=category,
    )


def _one_time(description: str, fee: float, category: LineItemCategory) -> LineItem:
    return LineItem(description=description, quantity=1, unit_price=fee, total=fee, category=category)


def _vehicle_item(catalog: Catalog, name: Optional[str], days: int) -> Optional[LineItem]:
    vehicle = catalog.vehicle(name)
    rate = resolve_daily_rate(vehicle, days)
    # zero-rate vehicles are not listed
    if not rate:
        return None
    return _per_day(vehicle.name, rate, days, VEHICLE)


def _insurance_item(rule: PricingRule, days: int) -> LineItem:
    # a zero rate is still listed so "free insurance" stays visible
    return _per_day(f"{rule.name} (Insurance)", rule.daily_rate_adjustment, days, INSURANCE)


def _requirement_item(rule: PricingRule, days: int) -> LineItem:
    category = requirement_category(rule.id)
    description = f"{rule.name} (Service)"
    if rule.is_one_time:
        return _one_time(description, rule.one_time_fee, category)
    return _per_day(description, rule.daily_rate_adjustment, days, category)


def _transport_item(location: Optional[Location], role: LocationRole) -> Optional[LineItem]:
    if location is None or location.transport_fee <= 0:
        return None
    return _one_time(f"{location.name} Transport Fee", location.transport_fee, transport_category(role))


def _transport_items(draft: QuoteDraft, catalog: Catalog) -> Dict[LocationRole, Optional[LineItem]]:
    fees = {
        LocationRole.PICKUP: _transport_item(catalog.location(draft.pickup_location), LocationRole.PICKUP),
        LocationRole.DROPOFF: None,
    }
    # same-location round trips pay the fee once
    if draft.dropoff_location != draft.pickup_location:
        fees[LocationRole.DROPOFF] = _transport_item(catalog.location(draft.dropoff_location), LocationRole.DROPOFF)
    return fees


def _is_per_day(item: LineItem, catalog: Catalog) -> bool:
    kind = item.category.kind
    if kind == LineItemKind.INSURANCE:
        return True
    if kind == LineItemKind.REQUIREMENT:
        rule = catalog.rule(item.category.ref)
        if rule is None:
            logger.debug(f"No rule {item.category.ref} in catalog; leaving line item as is")
            return False
        return not rule.is_one_time
    return False


def _with_duration(draft: QuoteDraft, days: int, catalog: Catalog) -> QuoteDraft:
    items = []
    for item in draft.line_items:
        if _is_per_day(item, catalog) and item.quantity != days:
            item = item.model_copy(update={"quantity": days, "total": item.unit_price * days})
        items.append(item)

    # the tier rate depends on the duration, so the vehicle is re-priced
    items = _put(items, VEHICLE, _vehicle_item(catalog, draft.vehicle_category, days))
    return draft.model_copy(update={"hire_duration_days": days, "line_items": items})


def _set_vehicle(draft: QuoteDraft, event: SetVehicle, catalog: Catalog) -> QuoteDraft:
    item = _vehicle_item(catalog, event.category, draft.hire_duration_days)
    return draft.model_copy(update={
        "vehicle_category": event.category,
        "line_items": _put(draft.line_items, VEHICLE, item),
    })


def _set_duration(draft: QuoteDraft, event: SetDuration, catalog: Catalog) -> QuoteDraft:
    return _with_duration(draft, event.days, catalog)


def _set_schedule(draft: QuoteDraft, event: SetSchedule, catalog: Catalog) -> QuoteDraft:
    updates = {}
    for field in ("pickup_date", "dropoff_date"):
        if field in event.model_fields_set:
            updates[field] = getattr(event, field)
    for field in ("pickup_time", "dropoff_time"):
        value = getattr(event, field)
        if value is not None:
            updates[field] = value
    draft = draft.model_copy(update=updates)

    days = calculate_hire_duration(
        draft.pickup_date, draft.pickup_time, draft.dropoff_date, draft.dropoff_time
    )
    if days != draft.hire_duration_days:
        draft = _with_duration(draft, days, catalog)
    return draft


def _set_location(draft: QuoteDraft, event: SetLocation, catalog: Catalog) -> QuoteDraft:
    draft = draft.model_copy(update={LOCATION_FIELDS[event.role]: event.location})
    items = draft.line_items
    for role, item in _transport_items(draft, catalog).items():
        items = _put(items, transport_category(role), item)
    return draft.model_copy(update={"line_items": items})


def _set_insurance(draft: QuoteDraft, event: SetInsurance, catalog: Catalog) -> QuoteDraft:
    rule = catalog.rule(event.rule_id, PricingRuleType.INSURANCE)
    item = _insurance_item(rule, draft.hire_duration_days) if rule else None
    return draft.model_copy(update={
        "selected_insurance_rule_id": rule.id if rule else None,
        "line_items": _put(draft.line_items, INSURANCE, item),
    })


def _toggle_requirement(draft: QuoteDraft, event: ToggleRequirement, catalog: Catalog) -> QuoteDraft:
    category = requirement_category(event.rule_id)
    selected = [rule_id for rule_id in draft.selected_requirement_rule_ids if rule_id != event.rule_id]

    if not event.checked:
        return draft.model_copy(update={
            "selected_requirement_rule_ids": selected,
            "line_items": _put(draft.line_items, category, None),
        })

    rule = catalog.rule(event.rule_id, PricingRuleType.ADDITIONAL_SERVICE)
    if rule is None:
        logger.warning(f"Ignoring unknown requirement rule {event.rule_id}")
        return draft

    items = list(draft.line_items)
    if find_item(items, category) is None:
        items.append(_requirement_item(rule, draft.hire_duration_days))
    if event.rule_id in draft.selected_requirement_rule_ids:
        selected = list(draft.selected_requirement_rule_ids)
    else:
        selected = list(draft.selected_requirement_rule_ids) + [event.rule_id]
    return draft.model_copy(update={"selected_requirement_rule_ids": selected, "line_items": items})


def _set_km_option(draft: QuoteDraft, event: SetKmOption, catalog: Catalog) -> QuoteDraft:
    return draft.model_copy(update={"selected_km_option_name": event.name})


def _set_customer(draft: QuoteDraft, event: SetCustomer, catalog: Catalog) -> QuoteDraft:
    updates = {k: v for k, v in event.model_dump(exclude={"type"}).items() if v is not None}
    return draft.model_copy(update=updates)


def _set_details(draft: QuoteDraft, event: SetDetails, catalog: Catalog) -> QuoteDraft:
    updates = {k: v for k, v in event.model_dump(exclude={"type"}).items() if v is not None}
    return draft.model_copy(update=updates)


_HANDLERS = {
    SetVehicle: _set_vehicle,
    SetDuration: _set_duration,
    SetSchedule: _set_schedule,
    SetLocation: _set_location,
    SetInsurance: _set_insurance,
    ToggleRequirement: _toggle_requirement,
    SetKmOption: _set_km_option,
    SetCustomer: _set_customer,
    SetDetails: _set_details,
}


def apply_event(draft: QuoteDraft, event, catalog: Catalog) -> QuoteDraft:
    """Return a new draft with ``event`` applied; ``draft`` is left untouched."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported quote event: {type(event).__name__}")
    return handler(draft, event, catalog)


def apply_events(draft: QuoteDraft, events, catalog: Catalog) -> QuoteDraft:
    for event in events:
        draft = apply_event(draft, event, catalog)
    return draft


def new_draft(catalog: Catalog) -> QuoteDraft:
    """Fresh draft with the catalog's default insurance pre-selected."""
    draft = QuoteDraft()
    default_insurance = catalog.default_insurance()
    if default_insurance is not None:
        draft = apply_event(draft, SetInsurance(rule_id=default_insurance.id), catalog)
    return draft
