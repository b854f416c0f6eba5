"""
Edit form for an order's shipment payload
"""
import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional

from core.schemas import GoodsItem, LocationDetails, ShipmentData, TransportDetails, coerce_number
from services.order_data import clean_value, goods_items, section

logger = logging.getLogger(__name__)

LOCATION_KEYS = {
    "street": "straat",
    "postal_code": "postcode",
    "city": "plaats",
    "country": "land",
    "contact_person": "contactpersoon",
}


def _text(source: Mapping, key: str) -> Optional[str]:
    value = clean_value(source.get(key))
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _number(source: Mapping, key: str):
    try:
        return coerce_number(clean_value(source.get(key)))
    except ValueError:
        logger.warning(f"Dropping non-numeric {key}={source.get(key)!r} from edit form")
        return None


def _date(source: Mapping, key: str) -> Optional[date]:
    text = _text(source, key)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.warning(f"Dropping unparsable {key}={text!r} from edit form")
        return None


def _location(payload: Mapping, key: str) -> LocationDetails:
    source = section(payload, key)
    return LocationDetails(**{name: _text(source, alias) for name, alias in LOCATION_KEYS.items()})


def build_shipment_form(payload: Mapping) -> ShipmentData:
    """
    Typed edit-form values from a normalized payload.

    Unlike validating the payload directly this never fails: values of the
    wrong shape are left blank. The goods list always has at least one row.
    """
    details = section(payload, "transport_details")
    goods = [
        GoodsItem(
            description=_text(item, "omschrijving"),
            quantity=_number(item, "aantal"),
            weight_kg=_number(item, "gewicht_kg"),
        )
        for item in goods_items(payload)
    ]
    return ShipmentData(
        loading_location=_location(payload, "laad_locatie"),
        unloading_location=_location(payload, "los_locatie"),
        transport_details=TransportDetails(
            loading_date=_date(details, "datum_laden"),
            time_from=_text(details, "tijd_van"),
            time_until=_text(details, "tijd_tot"),
            transport_type=_text(details, "transport_type"),
        ),
        goods_items=goods or [GoodsItem()],
    )


def form_to_payload(values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate raw form input (strings straight from the widgets) into the
    stored payload. Blank text becomes null, numeric text becomes a number.
    """
    return ShipmentData.model_validate(values).to_payload()
