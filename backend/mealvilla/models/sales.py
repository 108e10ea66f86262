from __future__ import annotations

from ..extensions import db
from mealvilla.time_utils import to_utc_z


PRODUCT_TYPES = ("burger", "jumbo", "family", "short")
QUANTITY_CATEGORIES = ("collected", "sold_cash", "sold_transfer", "sold_card", "returned", "damages")


def empty_quantities() -> dict[str, int]:
    return {product: 0 for product in PRODUCT_TYPES}


def sales_entry_key(user_id: str, entry_date: str) -> str:
    return f"{user_id}_{entry_date}"


class SalesEntry(db.Model):
    """
    Per-user, per-day sales accumulator.

    WHY: Staff submit what they collected and sold several times a day;
    each submission is added to the day's totals rather than replacing them.

    LIFECYCLE:
    - open (is_finalized = False): submissions add, reset zeroes
    - finalized: one-way lock, no further submissions or resets

    Each quantity column holds a {burger, jumbo, family, short} map of
    non-negative integers. version_id guards the read-merge-write.
    """
    __tablename__ = "sales_entries"
    __table_args__ = (
        db.UniqueConstraint("user_id", "entry_date", name="uq_sales_entries_user_date"),
        db.Index("ix_sales_entries_date", "entry_date"),
    )

    # "{user_id}_{YYYY-MM-DD}"
    id = db.Column(db.String(96), primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    staff_id = db.Column(db.String(6), nullable=False)
    entry_date = db.Column(db.String(10), nullable=False)

    collected = db.Column(db.JSON, nullable=False, default=empty_quantities)
    sold_cash = db.Column(db.JSON, nullable=False, default=empty_quantities)
    sold_transfer = db.Column(db.JSON, nullable=False, default=empty_quantities)
    sold_card = db.Column(db.JSON, nullable=False, default=empty_quantities)
    returned = db.Column(db.JSON, nullable=False, default=empty_quantities)
    damages = db.Column(db.JSON, nullable=False, default=empty_quantities)

    is_finalized = db.Column(db.Boolean, nullable=False, default=False)
    finalized_by_uid = db.Column(db.String(64), nullable=True)
    finalized_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def quantities(self) -> dict[str, dict[str, int]]:
        return {
            category: {**empty_quantities(), **(getattr(self, category) or {})}
            for category in QUANTITY_CATEGORIES
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.entry_date,
            "user_id": self.user_id,
            "staff_id": self.staff_id,
            **self.quantities(),
            "is_finalized": self.is_finalized,
            "finalized_by_uid": self.finalized_by_uid,
            "finalized_at": to_utc_z(self.finalized_at) if self.finalized_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
