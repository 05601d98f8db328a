"""Offer schemas.

An offer's `rules` depend on its `offer_type`; each type has its own rule
model carrying only the fields it needs, and unknown fields are rejected, so
e.g. a buy-X-get-Y rule with a discount percentage cannot be built.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from utils.timeutils import to_naive_utc


class OfferType(str, Enum):
    BUY_X_GET_Y = "buyXgetY"
    BUNDLE_DISCOUNT = "bundleDiscount"
    PERCENTAGE_OFF = "percentageOff"
    FIXED_AMOUNT_OFF = "fixedAmountOff"


class BuyXGetYRule(BaseModel):
    """Buy `buy_quantity`, get `get_quantity` free, repeatable per full group."""

    model_config = ConfigDict(extra="forbid")

    buy_quantity: int = Field(..., ge=1)
    get_quantity: int = Field(..., ge=1)


class BundleDiscountRule(BaseModel):
    """`min_quantity` units for `bundle_price`; further units at the effective price."""

    model_config = ConfigDict(extra="forbid")

    min_quantity: int = Field(..., ge=1)
    bundle_price: float = Field(..., ge=0)


class PercentageOffRule(BaseModel):
    model_config = ConfigDict(extra="forbid")

    discount_percentage: float = Field(..., ge=0, le=100)
    min_quantity: int = Field(1, ge=1)


class FixedAmountOffRule(BaseModel):
    model_config = ConfigDict(extra="forbid")

    discount_amount: float = Field(..., ge=0)
    min_quantity: int = Field(1, ge=1)


OfferRule = Union[BuyXGetYRule, BundleDiscountRule, PercentageOffRule, FixedAmountOffRule]

RULE_MODELS = {
    OfferType.BUY_X_GET_Y: BuyXGetYRule,
    OfferType.BUNDLE_DISCOUNT: BundleDiscountRule,
    OfferType.PERCENTAGE_OFF: PercentageOffRule,
    OfferType.FIXED_AMOUNT_OFF: FixedAmountOffRule,
}


def parse_offer_rule(offer_type: Union[OfferType, str], rules: Any) -> OfferRule:
    """Build the rule model that belongs to `offer_type`."""
    model = RULE_MODELS[OfferType(offer_type)]
    if isinstance(rules, model):
        return rules
    if isinstance(rules, BaseModel):
        rules = rules.model_dump()
    return model.model_validate(rules)


def _coerce_rules(data: Any) -> Any:
    """Before-validator shared by offer schemas: pick the rule model from offer_type."""
    if isinstance(data, dict) and data.get("offer_type") is not None and data.get("rules") is not None:
        try:
            offer_type = OfferType(data["offer_type"])
        except ValueError:
            return data
        data = dict(data)
        data["rules"] = parse_offer_rule(offer_type, data["rules"])
    return data


class OfferScope(BaseModel):
    product_ids: List[int] = Field(default_factory=list)
    category_ids: List[int] = Field(default_factory=list)
    subcategory_ids: List[int] = Field(default_factory=list)
    gender_ids: List[int] = Field(default_factory=list)


class OfferCreate(OfferScope):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    offer_type: OfferType
    rules: OfferRule
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    priority: int = Field(1, description="Higher wins")
    usage_limit: Optional[int] = Field(None, ge=0)
    display_on_homepage: bool = False
    display_in_navbar: bool = False

    @model_validator(mode="before")
    @classmethod
    def select_rule_model(cls, data):
        return _coerce_rules(data)

    @model_validator(mode="after")
    def validate_window(self):
        self.start_date = to_naive_utc(self.start_date)
        self.end_date = to_naive_utc(self.end_date)
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if not isinstance(self.rules, RULE_MODELS[self.offer_type]):
            raise ValueError(f"rules do not match offer type {self.offer_type.value}")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Summer Sale",
                "description": "20% off on all shirts",
                "offer_type": "percentageOff",
                "rules": {"discount_percentage": 20, "min_quantity": 1},
                "category_ids": [2],
                "start_date": "2026-06-01T00:00:00Z",
                "end_date": "2026-06-30T23:59:59Z",
                "priority": 5,
            }
        }


class OfferUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    offer_type: Optional[OfferType] = None
    rules: Optional[Dict[str, Any]] = None
    product_ids: Optional[List[int]] = None
    category_ids: Optional[List[int]] = None
    subcategory_ids: Optional[List[int]] = None
    gender_ids: Optional[List[int]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    usage_limit: Optional[int] = Field(None, ge=0)
    display_on_homepage: Optional[bool] = None
    display_in_navbar: Optional[bool] = None


class OfferResponse(OfferScope):
    """Offer snapshot returned by the API and stored in the cache."""

    id: int
    name: str
    description: Optional[str] = None
    offer_type: OfferType
    rules: OfferRule
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    priority: int = 1
    usage_limit: Optional[int] = None
    usage_count: int = 0
    display_on_homepage: bool = False
    display_in_navbar: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def select_rule_model(cls, data):
        return _coerce_rules(data)

    @model_validator(mode="after")
    def normalise_dates(self):
        self.start_date = to_naive_utc(self.start_date)
        self.end_date = to_naive_utc(self.end_date)
        return self

    @classmethod
    def from_model(cls, offer) -> "OfferResponse":
        return cls.model_validate(
            {
                column: getattr(offer, column)
                for column in (
                    "id", "name", "description", "offer_type", "rules",
                    "product_ids", "category_ids", "subcategory_ids", "gender_ids",
                    "start_date", "end_date", "is_active", "priority",
                    "usage_limit", "usage_count", "display_on_homepage",
                    "display_in_navbar", "created_at", "updated_at",
                )
            }
        )


class AppliedOffer(BaseModel):
    """Short offer description attached to a priced cart line."""

    id: int
    name: str
    description: Optional[str] = None
    offer_type: OfferType


class BestOfferResponse(BaseModel):
    offer: Optional[AppliedOffer] = None
    discount: float = 0.0
