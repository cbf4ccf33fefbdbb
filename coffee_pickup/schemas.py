"""
Request payload schemas

Each model validates one JSON body accepted by the API. Views call
``parse_payload`` so that pydantic failures surface as a 400 ``ValidationError``.
"""

from typing import List, Literal, Optional

import pydantic
from pydantic import BaseModel, EmailStr, Field, model_validator

from .errors import ValidationError


def parse_payload(model, data):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(details) from exc


# -----------------------------
# ORDERS
# -----------------------------
class OrderItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1, strict=True)


class OrderIn(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_avatar: Optional[str] = Field(None, min_length=1)
    pickup_time: str = Field(..., min_length=1, description="ISO-8601 instant")
    total_items: int = Field(1, ge=1, strict=True, description="Used when order_items is empty")
    order_items: List[OrderItemIn] = Field(default_factory=list)


class StatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


# -----------------------------
# PRODUCTS
# -----------------------------
class SizePriceModifiers(BaseModel):
    """Signed percentage adjustments applied to a beverage's base price"""
    Small: Optional[float] = Field(None, strict=True, allow_inf_nan=False)
    Medium: Optional[float] = Field(None, strict=True, allow_inf_nan=False)
    Large: Optional[float] = Field(None, strict=True, allow_inf_nan=False)


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., gt=0, strict=True, allow_inf_nan=False)
    image: str = Field(..., min_length=1)
    category: Literal["coffee", "dessert"]
    description: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5, strict=True, allow_inf_nan=False)
    is_active: bool = Field(True, strict=True)
    is_popular: bool = Field(False, strict=True)
    size_price_modifiers: Optional[SizePriceModifiers] = None

    def to_record(self):
        data = self.model_dump()
        if self.size_price_modifiers is not None:
            data["size_price_modifiers"] = self.size_price_modifiers.model_dump(exclude_unset=True)
        return data


NON_NULLABLE_PRODUCT_FIELDS = ("name", "price", "image", "category", "is_active", "is_popular")


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, gt=0, strict=True, allow_inf_nan=False)
    image: Optional[str] = Field(None, min_length=1)
    category: Optional[Literal["coffee", "dessert"]] = None
    description: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5, strict=True, allow_inf_nan=False)
    is_active: Optional[bool] = Field(None, strict=True)
    is_popular: Optional[bool] = Field(None, strict=True)
    size_price_modifiers: Optional[SizePriceModifiers] = None

    @model_validator(mode="after")
    def reject_null_required(self):
        for field in NON_NULLABLE_PRODUCT_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} may not be null")
        return self

    def to_changes(self):
        changes = self.model_dump(exclude_unset=True)
        if self.size_price_modifiers is not None:
            changes["size_price_modifiers"] = self.size_price_modifiers.model_dump(exclude_unset=True)
        return changes


# -----------------------------
# AUTH
# -----------------------------
class Credentials(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class BaristaSignup(Credentials):
    inviteCode: str = Field(..., min_length=1)


class BaristaGrant(BaseModel):
    inviteCode: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refreshToken: str = Field(..., min_length=1)
