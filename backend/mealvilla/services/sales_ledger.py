# Overview: Service-layer operations for the daily sales entry; additive submissions, reset and finalization.

"""
Sales Ledger

WHY: Staff record collected/sold/returned/damaged products through the day
in several sittings. A submission adds to the day's totals; it never
overwrites them. Submitting the same numbers twice counts them twice, and
reset is the way to start the day over.

INVARIANTS:
- One entry per (user_id, business date), keyed "{user_id}_{YYYY-MM-DD}".
- Quantities are non-negative integers.
- Once is_finalized is set, submissions and resets fail with Locked.
- The read-merge-write runs under the entry's version_id; a concurrent
  writer makes the stale one retry from a fresh read instead of
  overwriting it.
"""

from __future__ import annotations

from flask import current_app

from ..errors import Forbidden, InvalidQuantity, Locked, MissingIdentity, NotFound, OperationResult
from ..extensions import db
from ..models import SalesEntry
from ..models.sales import PRODUCT_TYPES, QUANTITY_CATEGORIES, empty_quantities, sales_entry_key
from ..roles import Actor, SALES_FINALIZER_ROLES
from .concurrency import run_with_retry
from .results import store_boundary
from mealvilla.time_utils import business_today, utcnow


def current_entry_date() -> str:
    return business_today(current_app.config.get("BUSINESS_TIMEZONE", "UTC")).isoformat()


def normalize_delta(delta: dict | None) -> dict[str, dict[str, int]]:
    """
    Validate a submitted delta and fill missing groups/products with zero.

    Raises InvalidQuantity for unknown groups or products and for values that
    are not non-negative integers (booleans and floats included).
    """
    if delta is None:
        delta = {}
    if not isinstance(delta, dict):
        raise InvalidQuantity("Sales entry must map quantity groups to product quantities.")

    unknown = sorted(set(delta) - set(QUANTITY_CATEGORIES))
    if unknown:
        raise InvalidQuantity(f"Unknown quantity group(s): {', '.join(unknown)}")

    normalized: dict[str, dict[str, int]] = {}
    for category in QUANTITY_CATEGORIES:
        group = delta.get(category)
        if group is None:
            group = {}
        if not isinstance(group, dict):
            raise InvalidQuantity(f"{category} must map products to quantities.")

        unknown_products = sorted(set(group) - set(PRODUCT_TYPES))
        if unknown_products:
            raise InvalidQuantity(f"Unknown product(s) in {category}: {', '.join(unknown_products)}")

        normalized[category] = {}
        for product in PRODUCT_TYPES:
            value = group.get(product)
            if value is None:
                value = 0
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidQuantity(f"{category}.{product} must be a non-negative whole number.")
            normalized[category][product] = value

    return normalized


def _require_identity(user_id: str | None, staff_id: str | None) -> None:
    if not user_id:
        raise MissingIdentity("User not authenticated.")
    if not staff_id:
        raise MissingIdentity("Staff ID not available.")


def _load_entry(key: str) -> SalesEntry | None:
    return db.session.query(SalesEntry).filter_by(id=key).first()


def _new_entry(key: str, user_id: str, staff_id: str, entry_date: str) -> SalesEntry:
    entry = SalesEntry(
        id=key,
        user_id=user_id,
        staff_id=staff_id,
        entry_date=entry_date,
        is_finalized=False,
        **{category: empty_quantities() for category in QUANTITY_CATEGORIES},
    )
    db.session.add(entry)
    return entry


def empty_entry(user_id: str, entry_date: str) -> dict:
    """The value get_today_entry returns before the first submission of the day."""
    return {
        "id": sales_entry_key(user_id, entry_date),
        "date": entry_date,
        "user_id": user_id,
        "staff_id": None,
        **{category: empty_quantities() for category in QUANTITY_CATEGORIES},
        "is_finalized": False,
        "exists": False,
    }


@store_boundary("save sales entry")
def submit_entry(delta: dict | None, user_id: str | None, staff_id: str | None) -> OperationResult:
    _require_identity(user_id, staff_id)
    additions = normalize_delta(delta)
    entry_date = current_entry_date()
    key = sales_entry_key(user_id, entry_date)

    def _op() -> SalesEntry:
        entry = _load_entry(key)
        if entry is None:
            entry = _new_entry(key, user_id, staff_id, entry_date)
        elif entry.is_finalized:
            raise Locked("Today's sales entry has been finalized and can no longer be changed.")

        current = entry.quantities()
        for category in QUANTITY_CATEGORIES:
            setattr(entry, category, {
                product: current[category][product] + additions[category][product]
                for product in PRODUCT_TYPES
            })
        entry.staff_id = staff_id
        db.session.commit()
        return entry

    # A concurrent first submission of the day may win the insert; the
    # retry then finds its row and adds on top of it.
    entry = run_with_retry(_op, retry_on_integrity=True)

    data = entry.to_dict()
    data["exists"] = True
    return OperationResult.ok("Sales entry saved successfully.", data=data)


@store_boundary("load today's sales entry")
def get_today_entry(user_id: str | None) -> OperationResult:
    if not user_id:
        raise MissingIdentity("User not authenticated.")

    entry_date = current_entry_date()
    entry = _load_entry(sales_entry_key(user_id, entry_date))
    if entry is None:
        return OperationResult.ok("No sales recorded today.", data=empty_entry(user_id, entry_date))

    data = entry.to_dict()
    data["exists"] = True
    return OperationResult.ok("Today's sales entry loaded.", data=data)


@store_boundary("reset sales entry")
def reset_today_entry(user_id: str | None, staff_id: str | None) -> OperationResult:
    _require_identity(user_id, staff_id)
    entry_date = current_entry_date()
    key = sales_entry_key(user_id, entry_date)

    def _op() -> SalesEntry:
        entry = _load_entry(key)
        if entry is None:
            entry = _new_entry(key, user_id, staff_id, entry_date)
        elif entry.is_finalized:
            raise Locked("Today's sales entry has been finalized and can no longer be reset.")
        else:
            for category in QUANTITY_CATEGORIES:
                setattr(entry, category, empty_quantities())
            entry.is_finalized = False
            entry.staff_id = staff_id
        db.session.commit()
        return entry

    entry = run_with_retry(_op, retry_on_integrity=True)
    current_app.logger.info("Sales entry %s reset", key)

    data = entry.to_dict()
    data["exists"] = True
    return OperationResult.ok("Today's sales entry has been reset.", data=data)


@store_boundary("finalize sales entry")
def finalize_today_entry(user_id: str | None, actor: Actor) -> OperationResult:
    if actor.role not in SALES_FINALIZER_ROLES:
        raise Forbidden("Permission denied: Only supervisors, managers or developers can finalize sales entries.")
    if not user_id:
        raise MissingIdentity("A user is required to finalize a sales entry.")

    key = sales_entry_key(user_id, current_entry_date())

    def _op() -> SalesEntry:
        entry = _load_entry(key)
        if entry is None:
            raise NotFound("No sales entry has been recorded today for this user.")
        if entry.is_finalized:
            raise Locked("Today's sales entry is already finalized.")
        entry.is_finalized = True
        entry.finalized_by_uid = actor.uid
        entry.finalized_at = utcnow()
        db.session.commit()
        return entry

    entry = run_with_retry(_op)
    current_app.logger.info("Sales entry %s finalized by %s", key, actor.uid)

    data = entry.to_dict()
    data["exists"] = True
    return OperationResult.ok("Today's sales entry has been finalized.", data=data)
