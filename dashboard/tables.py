"""
Table and form helpers for the Streamlit pages
"""
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from services.order_data import PLACEHOLDER, display_value, format_date, format_weight

SECTIONS = [
    ("new", "NIEUW"),
    ("in_progress", "IN BEHANDELING"),
    ("processed", "VERWERKT"),
]

OVERVIEW_COLUMNS = {
    "id": "Order #",
    "debtor": "Debiteur",
    "transport_type": "Transport type",
    "loading_from": "Laden van",
    "loading_until": "Laden tot",
    "goods_count": "Producten",
    "created_at": "Ontvangen",
}

BADGE_COLORS = {
    "default": "green",
    "secondary": "blue",
    "outline": "gray",
}

EMPTY_GOODS_ITEM = {"omschrijving": None, "aantal": None, "gewicht_kg": None}

ADDRESS_FIELDS = [
    ("Contactpersoon", "contactpersoon"),
    ("Adres", "straat"),
    ("Postcode", "postcode"),
    ("Plaats", "plaats"),
    ("Land", "land"),
]


def overview_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """Overview rows as a DataFrame with Dutch column headers"""
    frame = pd.DataFrame(rows, columns=list(OVERVIEW_COLUMNS))
    if not frame.empty:
        frame["created_at"] = pd.to_datetime(frame["created_at"], utc=True).dt.strftime("%d-%m-%Y %H:%M")
    return frame.rename(columns=OVERVIEW_COLUMNS)


def section_title(label: str, counts: Dict[str, int], key: str) -> str:
    return f"{label} ({counts.get(key, 0)})"


def status_badge(status: str, variant: str) -> str:
    """Markdown for a coloured status label"""
    color = BADGE_COLORS.get(variant, "green")
    return f":{color}-background[{status}]"


def goods_lines(shipment_data: Dict[str, Any]) -> List[Dict[str, str]]:
    """Read-only goods lines of a normalized payload"""
    goods = shipment_data.get("goederen")
    if not isinstance(goods, list):
        return []
    return [
        {
            "Omschrijving": display_value(item.get("omschrijving")),
            "Aantal": display_value(item.get("aantal")),
            "Gewicht": format_weight(item.get("gewicht_kg")),
        }
        for item in goods
        if isinstance(item, dict)
    ]


def address_lines(location: Any) -> List[Tuple[str, str]]:
    """Label and display value of every address field; missing ones show a dash"""
    location = location if isinstance(location, dict) else {}
    return [(label, display_value(location.get(key))) for label, key in ADDRESS_FIELDS]


def form_text(value: Any) -> str:
    """Text input value for a form default"""
    return "" if value is None else str(value)


def form_goods(form: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Goods rows of the edit form, never empty"""
    goods = (form.get("shipment_data") or {}).get("goederen") or []
    return [dict(item) for item in goods] or [dict(EMPTY_GOODS_ITEM)]


def loading_window(details: Dict[str, Any]) -> str:
    start = display_value(details.get("tijd_van"))
    end = display_value(details.get("tijd_tot"))
    if start == PLACEHOLDER and end == PLACEHOLDER:
        return PLACEHOLDER
    return f"{start} - {end}"


def loading_date(details: Dict[str, Any]) -> str:
    return format_date(details.get("datum_laden"))


def status_options(current: Optional[str], known: List[str]) -> List[str]:
    """Status choices for the form; an unknown current value stays selectable"""
    if current and current not in known:
        return [current, *known]
    return list(known)
