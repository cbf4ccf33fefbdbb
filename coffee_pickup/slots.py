"""
Pickup slot admission control.

Pickup times are bucketed into fixed 10 minute windows aligned to the Unix
epoch. A window accepts at most ``SLOT_LIMIT_ITEMS`` coffee items; desserts do
not count. An order's contribution is ``total_items`` when it carries no line
items, otherwise the summed quantity of its non-dessert lines. Line items are
matched to catalog categories by case-insensitive name, and a name that
matches nothing counts as coffee.

The load check and the later insert are separate store calls with no lock in
between, so two concurrent admissions into the same window can both pass and
overshoot the limit.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from . import db
from .errors import ValidationError
from .models import Order, Product, ProductCategory, as_utc, isoformat_utc

logger = logging.getLogger(__name__)

SLOT_MINUTES = 10
SLOT_LIMIT_ITEMS = 5
SLOT_WIDTH = timedelta(minutes=SLOT_MINUTES)
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_pickup_time(value):
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime.

    Values without an offset are read as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("Invalid pickup_time")
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError("Invalid pickup_time")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        raise ValidationError("Invalid pickup_time")


def compute_slot_bounds(pickup_time):
    instant = parse_pickup_time(pickup_time)
    buckets = (instant - EPOCH) // SLOT_WIDTH
    try:
        slot_start = EPOCH + buckets * SLOT_WIDTH
        return slot_start, slot_start + SLOT_WIDTH
    except OverflowError:
        raise ValidationError("Invalid pickup_time")


class CategoryLookup:
    """Case-insensitive product name -> category mapping."""

    def __init__(self, categories=None):
        self._categories = {
            name.lower(): category for name, category in (categories or {}).items()
        }

    @classmethod
    def from_catalog(cls):
        try:
            rows = db.session.query(Product.name, Product.category).all()
        except SQLAlchemyError:
            db.session.rollback()
            logger.warning("Failed to load product categories", exc_info=True)
            return cls()
        return cls({name: category for name, category in rows})

    def category_of(self, name):
        return self._categories.get((name or "").lower())

    def is_dessert(self, name):
        return self.category_of(name) == ProductCategory.DESSERT.value


def count_coffee_items(order_items, total_items, categories):
    if not order_items:
        return total_items if total_items is not None else 1
    return sum(
        item["quantity"] for item in order_items
        if not categories.is_dessert(item.get("name"))
    )


def load_slot_orders(slot_start, slot_end):
    return (
        db.session.query(Order.order_items, Order.total_items)
        .filter(Order.pickup_time >= as_utc(slot_start), Order.pickup_time < as_utc(slot_end))
        .all()
    )


@dataclass(frozen=True)
class Admitted:
    slot_start: datetime
    slot_end: datetime
    load: int
    requested: int


@dataclass(frozen=True)
class Rejected:
    slot_start: datetime
    slot_end: datetime
    load: int
    requested: int
    reason: str = "Pickup slot is full. Please choose another time."


@dataclass(frozen=True)
class SlotAvailability:
    slot_start: datetime
    slot_end: datetime
    remaining: int
    limit: int = SLOT_LIMIT_ITEMS

    def to_dict(self):
        return {
            "slotStart": isoformat_utc(self.slot_start),
            "slotEnd": isoformat_utc(self.slot_end),
            "remaining": self.remaining,
            "limit": self.limit,
        }


class SlotAdmissionController:
    def __init__(self, categories, load_orders=load_slot_orders, limit=SLOT_LIMIT_ITEMS):
        self.categories = categories
        self.load_orders = load_orders
        self.limit = limit

    def count_coffee_items(self, order_items, total_items):
        return count_coffee_items(order_items, total_items, self.categories)

    def current_slot_load(self, slot_start, slot_end):
        return sum(
            self.count_coffee_items(order_items, total_items)
            for order_items, total_items in self.load_orders(slot_start, slot_end)
        )

    def try_admit(self, pickup_time, coffee_items):
        slot_start, slot_end = compute_slot_bounds(pickup_time)
        load = self.current_slot_load(slot_start, slot_end)
        if load + coffee_items > self.limit:
            logger.info(
                "Rejected %d coffee items for slot %s (load %d/%d)",
                coffee_items, isoformat_utc(slot_start), load, self.limit,
            )
            return Rejected(slot_start, slot_end, load, coffee_items)
        return Admitted(slot_start, slot_end, load, coffee_items)

    def remaining_capacity(self, pickup_time):
        slot_start, slot_end = compute_slot_bounds(pickup_time)
        load = self.current_slot_load(slot_start, slot_end)
        return SlotAvailability(slot_start, slot_end, max(0, self.limit - load), self.limit)
