import os
import math
import requests
import streamlit as st

# ==========================================================
# CONFIG
# ==========================================================
API_BASE = os.getenv("STOCKLOCATOR_API_BASE", "http://localhost:3000")
PROM_URL = os.getenv("PROMETHEUS_URL", "http://prometheus:9090")
REQUEST_TIMEOUT = float(os.getenv("STOCKLOCATOR_CONSOLE_TIMEOUT", "30"))

st.set_page_config(page_title="Stock Locator", layout="centered")

# ==========================================================
# SESSION STATE
# ==========================================================
if "candidates" not in st.session_state:
    st.session_state.candidates = []

if "last_error" not in st.session_state:
    st.session_state.last_error = None

if "user_errors" not in st.session_state:
    st.session_state.user_errors = []

if "last_saved" not in st.session_state:
    st.session_state.last_saved = None

# ==========================================================
# API HELPERS
# ==========================================================
def api_post(path: str, payload: dict):
    """Returns (ok, body). Transport problems come back as an error body."""
    try:
        r = requests.post(f"{API_BASE}{path}", json=payload, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        return False, {"error": f"API unreachable: {e}"}
    try:
        body = r.json()
    except ValueError:
        body = {"error": f"Unexpected response (HTTP {r.status_code})"}
    return r.ok, body


def to_candidates(body: dict) -> list:
    # resolved and ambiguous lookups share one picker
    if "variants" in body:
        return body["variants"]
    return [
        {
            "id": body["variant"]["id"],
            "title": body.get("productTitle", ""),
            "currentLocation": body.get("currentLocation", ""),
        }
    ]


def location_label(value: str) -> str:
    return value if value else "— not set —"


def user_error_label(ue: dict) -> str:
    field = ".".join(ue.get("field") or []) or "—"
    return f"{field}: {ue.get('message')}"

# ==========================================================
# HEADER
# ==========================================================
st.markdown(
    """
    <div style="text-align:center;">
        <h1 style="font-size:3rem; font-weight:800;">Stock Locator</h1>
        <p style="font-size:1.2rem;">Scan a barcode, check where it lives, move it.</p>
    </div>
    """,
    unsafe_allow_html=True
)

tab_scan, tab_health = st.tabs(["Scan & Update", "System Health"])

# ==========================================================
# 1️⃣ SCAN & UPDATE
# ==========================================================
with tab_scan:
    barcode = st.text_input("Barcode", key="barcode")
    lookup_clicked = st.button("Look up", key="lookup")

    if lookup_clicked:
        st.session_state.last_saved = None
        st.session_state.user_errors = []
        with st.spinner("Searching Shopify…"):
            ok, body = api_post("/lookup-variant", {"barcode": barcode.strip()})
        if ok:
            st.session_state.candidates = to_candidates(body)
            st.session_state.last_error = None
        else:
            st.session_state.candidates = []
            st.session_state.last_error = body.get("error", "Lookup failed")

    # field-level rejections replace the generic headline
    if st.session_state.user_errors:
        for ue in st.session_state.user_errors:
            st.error(user_error_label(ue))
    elif st.session_state.last_error:
        st.error(st.session_state.last_error)

    candidates = st.session_state.candidates
    if candidates:
        if len(candidates) > 1:
            st.warning(f"{len(candidates)} variants share this barcode. Pick one.")

        idx = st.selectbox(
            "Variant",
            options=list(range(len(candidates))),
            format_func=lambda i: f"{candidates[i]['title']} ({location_label(candidates[i]['currentLocation'])})",
        )
        chosen = candidates[idx]

        st.metric("Current location", location_label(chosen["currentLocation"]))

        new_location = st.text_input("New location", value=chosen["currentLocation"], key=f"loc-{chosen['id']}")
        if st.button("Save location", key="save"):
            with st.spinner("Saving…"):
                ok, body = api_post(
                    "/update-location",
                    {"variantId": chosen["id"], "locationValue": new_location},
                )
            if ok:
                chosen["currentLocation"] = new_location
                st.session_state.last_saved = new_location
                st.session_state.last_error = None
                st.session_state.user_errors = []
            else:
                st.session_state.last_saved = None
                st.session_state.last_error = body.get("error", "Save failed")
                st.session_state.user_errors = body.get("userErrors", [])
            st.rerun()

    if st.session_state.last_saved is not None:
        st.success(f"Saved: {location_label(st.session_state.last_saved)}")

# ==========================================================
# 2️⃣ SYSTEM HEALTH — PROMETHEUS-AWARE
# ==========================================================
with tab_health:
    st.subheader("System Health")

    def promql(query: str):
        try:
            r = requests.get(
                f"{PROM_URL}/api/v1/query",
                params={"query": query},
                timeout=3,
            )
            if r.ok:
                result = r.json().get("data", {}).get("result", [])
                if result:
                    val = float(result[0]["value"][1])
                    if math.isnan(val):
                        return None
                    return val
        except (requests.RequestException, ValueError, KeyError, IndexError):
            return None
        return None

    try:
        up = requests.get(f"{API_BASE}/health", timeout=5).ok
    except requests.RequestException:
        up = False

    failures = promql('sum(rate(stocklocator_downstream_calls_total{outcome="error"}[5m]))')
    calls = promql("sum(rate(stocklocator_downstream_calls_total[5m]))")
    ambiguous = promql('sum(increase(stocklocator_lookup_outcomes_total{outcome="ambiguous"}[1h]))')

    col1, col2, col3 = st.columns(3)
    col1.metric("API Status", "🟢 Up" if up else "🔴 Down")
    col2.metric(
        "Shopify Error Rate",
        "—" if not calls else f"{round((failures or 0.0) / calls * 100, 2)}%",
    )
    col3.metric("Ambiguous Scans (1h)", "—" if ambiguous is None else int(ambiguous))

    st.caption("Metrics display '—' when Prometheus has no samples.")
