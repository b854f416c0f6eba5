"""
Pydantic schemas for orders and their shipment payload

Payload fields use the upstream (Dutch) keys as aliases; both the alias and
the attribute name are accepted on input, output uses the alias.
"""
import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.order_data import clean_value

Number = Union[int, float]


def blank_to_none(value: Any) -> Any:
    """Strip text; empty text and the "NULL" sentinel mean no value"""
    value = clean_value(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


def coerce_number(value: Any) -> Optional[Number]:
    """
    Numeric form input: blank means unset, anything else must parse.

    Only finite values are accepted; no range check is applied.
    """
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"{value!r} is not a finite number")
        return value
    text = str(value).replace(",", ".")
    try:
        number = float(text)
    except ValueError:
        raise ValueError(f"{value!r} is not a number")
    if not math.isfinite(number):
        raise ValueError(f"{value!r} is not a finite number")
    return int(number) if number.is_integer() and "." not in text and "e" not in text.lower() else number


class PayloadModel(BaseModel):
    """Base for the nested payload objects"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LocationDetails(PayloadModel):
    """Loading or unloading address"""
    street: Optional[str] = Field(None, alias="straat", description="Street and house number")
    postal_code: Optional[str] = Field(None, alias="postcode")
    city: Optional[str] = Field(None, alias="plaats")
    country: Optional[str] = Field(None, alias="land")
    contact_person: Optional[str] = Field(None, alias="contactpersoon")

    @field_validator("*", mode="before")
    @classmethod
    def clean_text(cls, value):
        return blank_to_none(value)


class TransportDetails(PayloadModel):
    """Loading date, time window and transport type"""
    loading_date: Optional[date] = Field(None, alias="datum_laden", description="YYYY-MM-DD")
    time_from: Optional[str] = Field(None, alias="tijd_van", description="HH:MM")
    time_until: Optional[str] = Field(None, alias="tijd_tot", description="HH:MM")
    transport_type: Optional[str] = Field(None, alias="transport_type", description="e.g. Next day")

    @field_validator("*", mode="before")
    @classmethod
    def clean_text(cls, value):
        return blank_to_none(value)


class GoodsItem(PayloadModel):
    """One line of goods"""
    description: Optional[str] = Field(None, alias="omschrijving")
    quantity: Optional[Number] = Field(None, alias="aantal")
    weight_kg: Optional[Number] = Field(None, alias="gewicht_kg")

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, value):
        return blank_to_none(value)

    @field_validator("quantity", "weight_kg", mode="before")
    @classmethod
    def coerce_numbers(cls, value):
        return coerce_number(value)


class ShipmentData(PayloadModel):
    """Typed form of the `order_data` payload"""
    loading_location: LocationDetails = Field(default_factory=LocationDetails, alias="laad_locatie")
    unloading_location: LocationDetails = Field(default_factory=LocationDetails, alias="los_locatie")
    transport_details: TransportDetails = Field(default_factory=TransportDetails, alias="transport_details")
    goods_items: List[GoodsItem] = Field(default_factory=list, alias="goederen")

    @field_validator("loading_location", "unloading_location", "transport_details", mode="before")
    @classmethod
    def default_section(cls, value):
        return value if isinstance(value, (dict, BaseModel)) else {}

    @field_validator("goods_items", mode="before")
    @classmethod
    def default_goods(cls, value):
        return value if isinstance(value, list) else []

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with the upstream keys, as stored in `order_data`"""
        return self.model_dump(mode="json", by_alias=True)


class OrderUpdate(BaseModel):
    """Schema for saving the edit form"""
    status: Optional[str] = Field(None, description="New workflow status")
    shipment_data: Optional[ShipmentData] = Field(None, description="Complete replacement payload")

    @field_validator("status", mode="before")
    @classmethod
    def clean_status(cls, value):
        return blank_to_none(value)


class OrderSummary(BaseModel):
    """Row of the overview tables"""
    id: int
    created_at: datetime
    status: str
    debtor: str
    customer_email: Optional[str] = None
    email_subject: Optional[str] = None
    transport_type: str
    loading_from: str
    loading_until: str
    goods_count: int


class OrdersOverview(BaseModel):
    """Orders grouped into the overview sections"""
    new: List[OrderSummary] = Field(default_factory=list)
    in_progress: List[OrderSummary] = Field(default_factory=list)
    processed: List[OrderSummary] = Field(default_factory=list)
    unrecognized: List[OrderSummary] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)
    total: int = 0
    generated_at: datetime


class OrderDetail(BaseModel):
    """Everything the detail view shows"""
    id: int
    created_at: datetime
    received_at: str = Field(..., description="created_at as dd-mm-YYYY HH:MM")
    status: str
    status_bucket: Optional[str] = None
    badge_variant: str
    customer_email: Optional[str] = None
    email_subject: Optional[str] = None
    email_body: Optional[str] = None
    document_url: Optional[str] = None
    document_view: str
    debtor: str
    shipment_data: Dict[str, Any] = Field(default_factory=dict, description="Normalized payload")
    goods_count: int
    available_actions: List[str]

    model_config = ConfigDict(from_attributes=True)


class OrderForm(BaseModel):
    """Initial values of the edit form"""
    id: int
    status: str
    shipment_data: ShipmentData


class OrderDeleted(BaseModel):
    deleted: bool = True
    order_id: int


__all__ = [
    "LocationDetails",
    "TransportDetails",
    "GoodsItem",
    "ShipmentData",
    "OrderUpdate",
    "OrderSummary",
    "OrdersOverview",
    "OrderDetail",
    "OrderForm",
    "OrderDeleted",
    "blank_to_none",
    "coerce_number",
]
