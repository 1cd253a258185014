"""
Data schemas for quotation documents and the values the pricing engine
produces from them.

Documents arrive from untrusted sources (the AI collaborator, form edits,
stored history), so every numeric field is coerced before validation:
anything that is not a finite number becomes 0 rather than an error.
Both snake_case and the application's camelCase keys are accepted.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from tile_quote.utils.numbers import coerce_flag, coerce_number, coerce_optional_number
from .enums import (
    CategoryBucket,
    InvoiceStatus,
    PriceSource,
    QuantityKind,
    QuotationStatus,
    TileType,
)

logger = logging.getLogger(__name__)

_INPUT_CONFIG = ConfigDict(
    alias_generator=AliasGenerator(validation_alias=to_camel),
    populate_by_name=True,
)


def coerce_list(value: Any, field: str) -> list:
    """Non-lists become empty lists; entries that are not objects are dropped."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        logger.warning(f"'{field}' is not a list ({type(value).__name__}); treated as empty")
        return []
    kept = [v for v in value if isinstance(v, (dict, BaseModel))]
    if len(kept) != len(value):
        logger.warning(f"Dropped {len(value) - len(kept)} malformed entries from '{field}'")
    return kept


def _as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


# ── Line items ───────────────────────────────────────────


class TileLineItem(BaseModel):
    """A single tile row: one category of area priced per carton."""
    model_config = _INPUT_CONFIG

    category: str = ""
    group: str = "General"
    size: str = ""
    tile_type: TileType = TileType.UNKNOWN
    sqm: float = 0.0
    cartons: int = 0
    unit_price: float = 0.0
    price_source: Optional[PriceSource] = None  # None + price > 0 = caller-set price

    @field_validator("category", "size", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v).strip()

    @field_validator("group", mode="before")
    @classmethod
    def _group(cls, v: Any) -> str:
        return _as_text(v).strip() or "General"

    @field_validator("tile_type", mode="before")
    @classmethod
    def _tile_type(cls, v: Any) -> TileType:
        if isinstance(v, TileType):
            return v
        normalized = _as_text(v).replace(" ", "").lower()
        for member in TileType:
            if member.value.replace(" ", "").lower() == normalized:
                return member
        return TileType.UNKNOWN

    @field_validator("sqm", "unit_price", mode="before")
    @classmethod
    def _non_negative(cls, v: Any, info: ValidationInfo) -> float:
        return max(0.0, coerce_number(v, info.field_name))

    @field_validator("cartons", mode="before")
    @classmethod
    def _whole_cartons(cls, v: Any) -> int:
        # A partial carton is still a carton that must be bought
        return int(math.ceil(max(0.0, coerce_number(v, "cartons"))))

    @field_validator("price_source", mode="before")
    @classmethod
    def _price_source(cls, v: Any) -> Optional[PriceSource]:
        try:
            return PriceSource(v) if v is not None else None
        except ValueError:
            return None


class MaterialLineItem(BaseModel):
    """A material row (cement, sand, grout...) priced per unit."""
    model_config = _INPUT_CONFIG

    item: str = ""
    quantity: float = 0.0
    unit: str = ""
    unit_price: float = 0.0
    price_source: Optional[PriceSource] = None

    @field_validator("item", "unit", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v).strip()

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def _non_negative(cls, v: Any, info: ValidationInfo) -> float:
        return max(0.0, coerce_number(v, info.field_name))

    @field_validator("price_source", mode="before")
    @classmethod
    def _price_source(cls, v: Any) -> Optional[PriceSource]:
        try:
            return PriceSource(v) if v is not None else None
        except ValueError:
            return None


class Adjustment(BaseModel):
    """Signed adjustment: negative = discount, positive = surcharge."""
    model_config = _INPUT_CONFIG

    description: str = ""
    amount: float = 0.0

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return coerce_number(v, "amount")


class ChecklistItem(BaseModel):
    model_config = _INPUT_CONFIG

    item: str = ""
    checked: bool = False

    @field_validator("checked", mode="before")
    @classmethod
    def _checked(cls, v: Any) -> bool:
        return bool(coerce_flag(v))


class ClientDetails(BaseModel):
    model_config = _INPUT_CONFIG

    client_name: str = ""
    client_address: str = ""
    client_phone: str = ""
    project_name: str = ""
    show_client_name: bool = True
    show_client_address: bool = True
    show_client_phone: bool = True
    show_project_name: bool = True
    client_id: Optional[str] = None


# ── Documents ────────────────────────────────────────────


class PricedDocument(BaseModel):
    """
    The priced content shared by quotations and invoices.

    Visibility flags are optional; ``None`` means "use the profile default"
    (see TotalsAggregator). Hiding a component zeroes its contribution to
    the totals but never removes the underlying lines.
    """
    model_config = _INPUT_CONFIG

    tiles: list[TileLineItem] = []
    materials: list[MaterialLineItem] = []
    workmanship_rate: float = 0.0
    maintenance: float = 0.0
    profit_percentage: Optional[float] = None

    show_materials: Optional[bool] = None
    show_adjustments: Optional[bool] = None
    show_workmanship: Optional[bool] = None
    show_maintenance: Optional[bool] = None
    show_tax: Optional[bool] = None

    @field_validator("tiles", "materials", mode="before")
    @classmethod
    def _lines(cls, v: Any, info: ValidationInfo) -> list:
        return coerce_list(v, info.field_name)

    @field_validator("workmanship_rate", "maintenance", mode="before")
    @classmethod
    def _number(cls, v: Any, info: ValidationInfo) -> float:
        return coerce_number(v, info.field_name)

    @field_validator("profit_percentage", mode="before")
    @classmethod
    def _optional_number(cls, v: Any, info: ValidationInfo) -> Optional[float]:
        return coerce_optional_number(v, info.field_name)

    @field_validator(
        "show_materials", "show_adjustments", "show_workmanship",
        "show_maintenance", "show_tax", mode="before",
    )
    @classmethod
    def _flag(cls, v: Any) -> Optional[bool]:
        return coerce_flag(v)


class QuotationDocument(PricedDocument):
    """A quotation: priced content plus adjustments, deposit and client info."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    date: datetime = Field(default_factory=datetime.now)
    status: QuotationStatus = QuotationStatus.PENDING
    client_details: ClientDetails = Field(default_factory=ClientDetails)
    adjustments: list[Adjustment] = []
    deposit_percentage: Optional[float] = None
    checklist: list[ChecklistItem] = []
    terms_and_conditions: str = ""
    invoice_id: Optional[str] = None
    is_bulk_generated: bool = False
    show_checklist: Optional[bool] = None
    show_cost_summary: Optional[bool] = None  # display only; never alters totals

    @field_validator("adjustments", "checklist", mode="before")
    @classmethod
    def _entries(cls, v: Any, info: ValidationInfo) -> list:
        return coerce_list(v, info.field_name)

    @field_validator("deposit_percentage", mode="before")
    @classmethod
    def _deposit(cls, v: Any) -> Optional[float]:
        return coerce_optional_number(v, "deposit_percentage")

    @field_validator("show_checklist", "show_cost_summary", mode="before")
    @classmethod
    def _display_flag(cls, v: Any) -> Optional[bool]:
        return coerce_flag(v)


class InvoiceDocument(PricedDocument):
    """An invoice raised from a quotation. Invoices carry no adjustments or deposit."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    quotation_id: str = ""
    invoice_number: str = ""
    invoice_date: datetime = Field(default_factory=datetime.now)
    due_date: Optional[datetime] = None
    status: InvoiceStatus = InvoiceStatus.UNPAID
    client_details: ClientDetails = Field(default_factory=ClientDetails)
    payment_terms: str = ""
    bank_details: str = ""
    invoice_notes: str = ""
    payment_date: Optional[datetime] = None


class Expense(BaseModel):
    model_config = _INPUT_CONFIG

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    date: datetime = Field(default_factory=datetime.now)
    category: str = "Other"
    description: str = ""
    amount: float = 0.0
    quotation_id: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return coerce_number(v, "amount")


# ── Engine outputs ───────────────────────────────────────


class TotalsSummary(BaseModel):
    """
    The one totals shape every presentation surface consumes verbatim.
    Created fresh on every calculation and never persisted on its own.
    """
    model_config = ConfigDict(frozen=True)

    total_sqm: float = 0.0
    total_tile_cost: float = 0.0
    total_material_cost: float = 0.0
    workmanship_cost: float = 0.0
    maintenance_cost: float = 0.0
    workmanship_and_maintenance: float = 0.0
    pre_profit_total: float = 0.0
    profit_amount: float = 0.0
    subtotal: float = 0.0
    total_adjustments: float = 0.0
    post_adjustment_subtotal: float = 0.0
    tax_amount: float = 0.0
    grand_total: float = 0.0
    deposit_amount: float = 0.0


class RateResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit_price: float
    coverage_rate: float
    bucket: Optional[CategoryBucket] = None  # None = no keyword matched
    price_source: PriceSource
    tile_type: TileType = TileType.UNKNOWN


class Reconciliation(BaseModel):
    model_config = ConfigDict(frozen=True)

    sqm: float
    cartons: int
    driving: QuantityKind


class WastageResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    new_sqm: float
    new_cartons: int


# ── Quantity inputs (which field drives a reconciliation) ─


class FromArea(BaseModel):
    """The area was edited: cartons are derived from it."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["from_area"] = "from_area"
    sqm: float = 0.0

    @field_validator("sqm", mode="before")
    @classmethod
    def _sqm(cls, v: Any) -> float:
        return coerce_number(v, "sqm")


class FromCartons(BaseModel):
    """The carton count was edited: area is derived from it."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["from_cartons"] = "from_cartons"
    cartons: float = 0

    @field_validator("cartons", mode="before")
    @classmethod
    def _cartons(cls, v: Any) -> float:
        return coerce_number(v, "cartons")


class Unspecified(BaseModel):
    """No quantity was given; nothing is invented."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["unspecified"] = "unspecified"


QuantityInput = Annotated[
    Union[FromArea, FromCartons, Unspecified],
    Field(discriminator="kind"),
]
