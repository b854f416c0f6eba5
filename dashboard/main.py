"""
Streamlit dashboard for triaging transport orders

Run with:
    streamlit run dashboard/main.py
"""
from datetime import date

import streamlit as st
import streamlit.components.v1 as components

from config.settings import get_settings
from core.models import OrderStatus
from dashboard.actions import displayed_status, run_delete, run_save, run_status_action
from dashboard.api_client import DashboardApiError, OrdersApiClient
from dashboard.tables import (
    address_lines,
    EMPTY_GOODS_ITEM,
    SECTIONS,
    form_goods,
    form_text,
    goods_lines,
    loading_date,
    loading_window,
    overview_frame,
    section_title,
    status_badge,
    status_options,
)
from services.order_data import display_value
from services.order_workflow import OrderAction, available_actions, badge_variant

# Configure page
st.set_page_config(
    page_title="Orders overzicht",
    page_icon="🚚",
    layout="wide",
    initial_sidebar_state="expanded",
)

settings = get_settings()


@st.cache_resource
def get_client() -> OrdersApiClient:
    return OrdersApiClient.from_settings(settings)


client = get_client()
st.session_state.setdefault("optimistic_status", {})
st.session_state.setdefault("flash", None)


def flash(message: str):
    """Show a message after the next rerun"""
    st.session_state.flash = message


def open_order(order_id):
    st.query_params["order"] = str(order_id)
    st.rerun()


def back_to_overview():
    st.query_params.clear()
    st.rerun()


# Sidebar
st.sidebar.header("🚚 Orders")
try:
    health = client.health()
    st.sidebar.success(f"✅ API Status: {health.get('status', 'Unknown')}")
except DashboardApiError:
    st.sidebar.error("❌ API Unavailable")
    st.error(
        "🚨 **API Connection Failed**\n\nPlease start the API server using:\n"
        "```bash\nuvicorn api.main:create_app --factory --port 8000\n```"
    )
    st.stop()

auto_refresh = st.sidebar.toggle("Auto-refresh", value=True)
if auto_refresh:
    st.sidebar.caption(f"Ververst elke {settings.DASHBOARD_AUTO_REFRESH_SECONDS}s")
else:
    st.sidebar.caption("Auto-refresh gepauzeerd")

if st.session_state.flash:
    st.toast(st.session_state.flash)
    st.session_state.flash = None


def render_overview():
    """Order sections; re-fetched by the fragment timer"""
    try:
        overview = client.get_overview(settings.ORDERS_LIST_LIMIT)
    except DashboardApiError as e:
        st.error(f"Orders konden niet worden geladen: {e.message}")
        return
    counts = overview.get("counts", {})

    for key, label in SECTIONS:
        with st.container(border=True):
            st.subheader(section_title(label, counts, key))
            rows = overview.get(key, [])
            if not rows:
                st.caption("Geen orders gevonden.")
                continue
            selection = st.dataframe(
                overview_frame(rows),
                hide_index=True,
                use_container_width=True,
                on_select="rerun",
                selection_mode="single-row",
                key=f"table_{key}",
            )
            selected = selection.selection.rows
            if selected:
                open_order(rows[selected[0]]["id"])

    unrecognized = overview.get("unrecognized", [])
    if unrecognized:
        with st.expander(f"⚠️ Onbekende status ({len(unrecognized)})"):
            st.dataframe(overview_frame(unrecognized), hide_index=True, use_container_width=True)

    st.caption(f"Bijgewerkt: {overview.get('generated_at', '-')}")


def render_source_column(order):
    """Email information, or the PDF when it can be embedded"""
    if order["document_view"] == "embed":
        components.iframe(order["document_url"], height=900, scrolling=True)
        return

    st.markdown("##### EMAIL INFORMATIE")
    st.caption("Van")
    st.write(order.get("customer_email") or "-")
    st.caption("Onderwerp")
    st.write(order.get("email_subject") or "-")
    st.caption("Ontvangen")
    st.write(order["received_at"])
    st.divider()
    st.caption("Email inhoud")
    if order.get("email_body"):
        st.text(order["email_body"])
    else:
        st.info("Geen email tekst beschikbaar.")

    if order["document_view"] == "missing":
        st.warning("⚠️ Geen PDF bijlage gevonden voor deze order")
    else:
        st.info("📄 PDF is opgeslagen in Google Cloud Storage maar niet publiek toegankelijk.")
        st.link_button("Open in GCS Console (vereist inlog)", order["document_url"])


def render_actions(order, status_slot):
    """Workflow buttons for the displayed status, plus delete with confirmation"""
    order_id = order["id"]
    overrides = st.session_state.optimistic_status
    status = displayed_status(order_id, order["status"], overrides)
    actions = available_actions(status)

    def show_status(value):
        status_slot.markdown(f"**Status:** {status_badge(value, badge_variant(value))}")

    show_status(status)
    cols = st.columns(4)

    for col, action, label in (
        (cols[0], OrderAction.TAKE_IN_PROGRESS, "IN BEHANDELING NEMEN"),
        (cols[1], OrderAction.MARK_PROCESSED, "MARKEER ALS VERWERKT"),
    ):
        if action in actions and col.button(label, type="primary", key=f"{action.value}_{order_id}"):
            with st.spinner("Bezig..."):
                result = run_status_action(client, order_id, action, status, overrides, show_status)
            if result.ok:
                flash(result.message)
                st.rerun()
            st.error(result.message)

    confirm_key = f"confirm_delete_{order_id}"
    if not st.session_state.get(confirm_key):
        if cols[3].button("VERWIJDEREN", key=f"delete_{order_id}"):
            st.session_state[confirm_key] = True
            st.rerun()
        return

    st.warning("Weet je het zeker?")
    yes, no = st.columns(2)
    if yes.button("JA, VERWIJDER", type="primary", key=f"delete_yes_{order_id}"):
        result = run_delete(client, order_id)
        st.session_state[confirm_key] = False
        if result.ok:
            flash(result.message)
            back_to_overview()
        st.error(result.message)
    if no.button("NEE", key=f"delete_no_{order_id}"):
        st.session_state[confirm_key] = False
        st.rerun()


def render_location_inputs(values, key):
    st.text_input("Contactpersoon", form_text(values.get("contactpersoon")), key=f"{key}_contact")
    st.text_input("Adres", form_text(values.get("straat")), key=f"{key}_street", placeholder="Straatnaam + huisnummer")
    left, right = st.columns(2)
    left.text_input("Postcode", form_text(values.get("postcode")), key=f"{key}_postcode", placeholder="1234 AB")
    right.text_input("Plaats", form_text(values.get("plaats")), key=f"{key}_city")
    st.text_input("Land", form_text(values.get("land")), key=f"{key}_country")


def location_values(key):
    state = st.session_state
    return {
        "contactpersoon": state[f"{key}_contact"],
        "straat": state[f"{key}_street"],
        "postcode": state[f"{key}_postcode"],
        "plaats": state[f"{key}_city"],
        "land": state[f"{key}_country"],
    }


GOODS_FIELDS = (("omschrijving", "desc"), ("aantal", "qty"), ("gewicht_kg", "weight"))


def sync_goods(order_id, goods):
    """Copy typed goods values back into the rows and reset their widgets"""
    for index, item in enumerate(goods):
        for field, suffix in GOODS_FIELDS:
            key = f"goods_{order_id}_{index}_{suffix}"
            if key in st.session_state:
                item[field] = st.session_state.pop(key)


def render_form(order, form):
    """Edit form for status and shipment data"""
    order_id = order["id"]
    data = form["shipment_data"]
    details = data.get("transport_details") or {}
    goods_key = f"goods_rows_{order_id}"
    if goods_key not in st.session_state:
        st.session_state[goods_key] = form_goods(form)
    goods = st.session_state[goods_key]

    st.markdown(f"##### PRODUCTEN ({len(goods)})")
    add_col, remove_col = st.columns(2)
    if add_col.button("+ Toevoegen", key=f"add_goods_{order_id}"):
        sync_goods(order_id, goods)
        goods.append(dict(EMPTY_GOODS_ITEM))
        st.rerun()
    if len(goods) > 1:
        remove_index = remove_col.selectbox(
            "Verwijder product", range(1, len(goods) + 1), key=f"remove_goods_idx_{order_id}"
        )
        if remove_col.button("Verwijder", key=f"remove_goods_{order_id}"):
            sync_goods(order_id, goods)
            goods.pop(remove_index - 1)
            st.rerun()

    known = [status.value for status in OrderStatus]
    options = status_options(form["status"], known)

    with st.form(f"order_form_{order_id}"):
        st.markdown("##### ALGEMEEN")
        left, right = st.columns(2)
        status = left.selectbox("Status", options, index=options.index(form["status"]) if form["status"] in options else 0)
        transport_type = right.text_input(
            "Transport type", form_text(details.get("transport_type")), placeholder="Bijv. Next day"
        )

        st.markdown("##### LADEN")
        left, mid, right = st.columns(3)
        raw_date = details.get("datum_laden")
        loading = left.date_input(
            "Datum laden",
            value=date.fromisoformat(raw_date) if raw_date else None,
            format="DD-MM-YYYY",
        )
        time_from = mid.text_input("Tijd van", form_text(details.get("tijd_van")), placeholder="HH:MM")
        time_until = right.text_input("Tijd tot", form_text(details.get("tijd_tot")), placeholder="HH:MM")
        render_location_inputs(data.get("laad_locatie") or {}, f"laad_{order_id}")

        st.markdown("##### LOSSEN")
        render_location_inputs(data.get("los_locatie") or {}, f"los_{order_id}")

        st.markdown("##### PRODUCTEN")
        for index, item in enumerate(goods):
            st.caption(f"Product {index + 1}")
            left, mid, right = st.columns([2, 1, 1])
            left.text_input("Omschrijving", form_text(item.get("omschrijving")), key=f"goods_{order_id}_{index}_desc")
            mid.text_input("Aantal", form_text(item.get("aantal")), key=f"goods_{order_id}_{index}_qty")
            right.text_input("Gewicht (kg)", form_text(item.get("gewicht_kg")), key=f"goods_{order_id}_{index}_weight")

        submitted = st.form_submit_button("💾 Opslaan", type="primary")

    if not submitted:
        return

    state = st.session_state
    values = {
        "laad_locatie": location_values(f"laad_{order_id}"),
        "los_locatie": location_values(f"los_{order_id}"),
        "transport_details": {
            "datum_laden": loading.isoformat() if loading else None,
            "tijd_van": time_from,
            "tijd_tot": time_until,
            "transport_type": transport_type,
        },
        "goederen": [
            {
                "omschrijving": state[f"goods_{order_id}_{index}_desc"],
                "aantal": state[f"goods_{order_id}_{index}_qty"],
                "gewicht_kg": state[f"goods_{order_id}_{index}_weight"],
            }
            for index in range(len(goods))
        ],
    }
    with st.spinner("Opslaan..."):
        result = run_save(client, order_id, status, values)
    if result.ok:
        del st.session_state[goods_key]
        flash(result.message)
        st.rerun()
    st.error(result.message)


def render_order(order_id):
    order = client.get_order(order_id)
    if order is None:
        st.error(f"Order #{order_id} niet gevonden")
        if st.button("← OVERZICHT"):
            back_to_overview()
        return

    header, back = st.columns([4, 1])
    header.title(f"ORDER #{order['id']}")
    header.caption(order.get("email_subject") or "Geen onderwerp")
    if back.button("← OVERZICHT"):
        back_to_overview()

    status_slot = st.empty()
    render_actions(order, status_slot)

    source_col, form_col = st.columns(2)
    with source_col:
        render_source_column(order)

    with form_col:
        data = order["shipment_data"]
        details = data.get("transport_details") or {}
        st.markdown("##### SAMENVATTING")
        left, right = st.columns(2)
        left.caption("Debiteur")
        left.write(order["debtor"])
        right.caption("Transport type")
        right.write(display_value(details.get("transport_type")))
        left.caption("Datum laden")
        left.write(loading_date(details))
        right.caption("Tijd van - tot")
        right.write(loading_window(details))

        st.caption(f"Producten ({order['goods_count']})")
        lines = goods_lines(data)
        if lines:
            st.table(lines)
        else:
            st.caption("Geen producten opgegeven")

        left, right = st.columns(2)
        for col, title, key in ((left, "LADEN", "laad_locatie"), (right, "LOSSEN", "los_locatie")):
            with col.container(border=True):
                st.markdown(f"###### {title}")
                for label, value in address_lines(data.get(key)):
                    st.caption(label)
                    st.write(value)

        st.divider()
        render_form(order, client.get_order_form(order_id))


# Main page
selected_order = st.query_params.get("order")
try:
    if selected_order and selected_order.isdigit():
        render_order(int(selected_order))
    else:
        st.title("ORDERS OVERZICHT")
        run_every = settings.DASHBOARD_AUTO_REFRESH_SECONDS if auto_refresh else None
        st.fragment(run_every=run_every)(render_overview)()
except DashboardApiError as e:
    st.error(f"Orders konden niet worden geladen: {e.message}")
    st.stop()
