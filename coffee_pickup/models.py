
import uuid
from datetime import datetime, timezone
from enum import Enum
from . import db


def new_id():
    return str(uuid.uuid4())


def utcnow():
    # Stored naive, always UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value):
    """Convert an aware datetime to the naive UTC form the store holds."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OrderStatus(str, Enum):
    NEW = "new"
    ACCEPTED = "accepted"
    READY = "ready"
    PICKED_UP = "picked_up"


class ProductCategory(str, Enum):
    COFFEE = "coffee"
    DESSERT = "dessert"


SIZES = ("Small", "Medium", "Large")
STANDARD_SIZE = "Standard"


class Order(db.Model):
    __tablename__ = "orders"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_name = db.Column(db.String(120), nullable=False)
    customer_avatar = db.Column(db.Text, nullable=True)
    pickup_time = db.Column(db.DateTime, nullable=False, index=True)
    # Free-form: any non-empty status a barista sends is stored as is.
    status = db.Column(db.String(32), default=OrderStatus.NEW.value, nullable=False)
    total_items = db.Column(db.Integer, default=1, nullable=False)
    order_items = db.Column(db.JSON, default=list, nullable=False)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "customer_avatar": self.customer_avatar,
            "pickup_time": isoformat_utc(self.pickup_time),
            "status": self.status,
            "total_items": self.total_items,
            "order_items": list(self.order_items or []),
            "user_id": self.user_id,
            "created_at": isoformat_utc(self.created_at),
        }


class Product(db.Model):
    __tablename__ = "products"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    price = db.Column(db.Float, nullable=False)
    image = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(20), nullable=False)
    description = db.Column(db.Text, nullable=True)
    rating = db.Column(db.Float, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_popular = db.Column(db.Boolean, default=False, nullable=False)
    size_price_modifiers = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def price_for_size(self, size):
        """Beverages scale by the size's percentage modifier; desserts stay flat."""
        if self.category == ProductCategory.DESSERT.value or size == STANDARD_SIZE:
            return self.price
        percent = (self.size_price_modifiers or {}).get(size) or 0
        return round(self.price * (1 + percent / 100), 2)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "category": self.category,
            "description": self.description,
            "rating": self.rating,
            "is_active": self.is_active,
            "is_popular": self.is_popular,
            "size_price_modifiers": self.size_price_modifiers,
            "created_at": isoformat_utc(self.created_at),
        }


class Barista(db.Model):
    __tablename__ = "baristas"
    email = db.Column(db.String(255), primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "created_at": isoformat_utc(self.created_at),
        }
