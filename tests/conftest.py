"""
Shared fixtures: an in-memory orders database and an API client on top of it
"""
import copy
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from config.settings import Settings
from core.database import create_session_factory, create_tables, drop_tables, session_scope
from core.models import Order

BASE_TIME = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

SAMPLE_ORDER_DATA = {
    "laad_locatie": {
        "straat": "Havenweg 12",
        "postcode": "3089 JB",
        "plaats": "Rotterdam",
        "land": "NL",
        "contactpersoon": "NULL",
    },
    "los_locatie": {
        "straat": "Industrieweg 4",
        "postcode": "5928 PR",
        "plaats": "Venlo",
        "land": "NL",
        "contactpersoon": "Jan",
    },
    "transport_details": {
        "datum_laden": "2024-05-03",
        "tijd_van": "08:00",
        "tijd_tot": "12:00",
        "transport_type": "Next day",
    },
    "goederen": [
        {"omschrijving": "Pallets", "aantal": 4, "gewicht_kg": 800},
    ],
}


@pytest.fixture
def order_data():
    return copy.deepcopy(SAMPLE_ORDER_DATA)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        DATABASE_CREATE_TABLES=True,
        ORDERS_CACHE_TTL_SECONDS=0,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    create_tables(application.state.engine)
    yield application
    drop_tables(application.state.engine)
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_factory(app):
    return create_session_factory(app.state.engine)


@pytest.fixture
def add_order(session_factory):
    """Insert an order row; later calls get a later created_at"""
    counter = {"n": 0}

    def _add_order(status="Review", shipment_data=None, **columns):
        counter["n"] += 1
        columns.setdefault("created_at", BASE_TIME + timedelta(minutes=counter["n"]))
        columns.setdefault("customer_email", "planning@hittra.nl")
        columns.setdefault("email_subject", f"Transportopdracht {counter['n']}")
        with session_scope(session_factory) as db:
            order = Order(status=status, shipment_data=shipment_data, **columns)
            db.add(order)
            db.flush()
            return order.id

    return _add_order
