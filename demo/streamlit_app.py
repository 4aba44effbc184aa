from __future__ import annotations

"""Streamlit demo UI for the Wealth AI FastAPI backend."""

from typing import Any

import httpx
import streamlit as st

from wealth_ai.calculators.formatting import format_inr

DEFAULT_API_URL = "http://localhost:8000"
QUICK_ACTIONS = {
    "Section 80C": "section-80c",
    "SIP Guide": "sip-calculator",
    "Tax Planning": "tax-planning",
    "EMI Planning": "emi-planning",
    "Portfolio": "investment-portfolio",
    "Retirement": "retirement-planning",
}


def _get(api_url: str, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
    with httpx.Client(timeout=30.0) as client:
        return client.get(api_url.rstrip("/") + path, params=params)


def _post_json(api_url: str, path: str, payload: dict[str, Any]) -> httpx.Response:
    """POST JSON payloads to the API."""
    with httpx.Client(timeout=60.0) as client:
        return client.post(api_url.rstrip("/") + path, json=payload)


def _health_check(api_url: str) -> tuple[bool, str]:
    """Return backend health status and a human-readable message."""
    try:
        response = _get(api_url, "/health")
        if response.status_code == 200:
            return True, "API is reachable."
        return False, f"API responded with status {response.status_code}."
    except httpx.HTTPError as exc:
        return False, f"API connection failed: {exc}"


def _show_reply(response: httpx.Response) -> None:
    if response.status_code != 200:
        st.error(f"API responded with status {response.status_code}: {response.text}")
        return
    payload = response.json()
    st.session_state.chat_messages = payload.get("history", [])
    if payload.get("error"):
        st.warning("The model is unavailable; showing a fallback reply.")


def _calculator(api_url: str, kind: str, payload: dict[str, Any], labels: dict[str, str]) -> None:
    try:
        response = _post_json(api_url, f"/calculators/{kind}", payload)
    except httpx.HTTPError as exc:
        st.error(f"API connection failed: {exc}")
        return
    result = response.json()
    for key, label in labels.items():
        st.metric(label, format_inr(result.get(key, 0)))


st.set_page_config(page_title="Wealth AI - Your AI Chartered Accountant", layout="wide")
st.title("Wealth AI")
st.caption("Tax planning, investments and calculators backed by the Wealth AI API.")

with st.sidebar:
    st.header("Connection")
    api_url = st.text_input("API base URL", value=DEFAULT_API_URL)
    if st.button("Health Check"):
        ok, message = _health_check(api_url)
        if ok:
            st.success(message)
        else:
            st.error(message)

tab_chat, tab_calc, tab_library, tab_docs = st.tabs(
    ["Chat", "Calculators", "Knowledge Library", "Documents"]
)

with tab_chat:
    if "chat_messages" not in st.session_state:
        st.session_state.chat_messages = []

    columns = st.columns(len(QUICK_ACTIONS))
    for column, (label, action) in zip(columns, QUICK_ACTIONS.items()):
        if column.button(label):
            try:
                _show_reply(_post_json(api_url, "/chat/quick-action", {"action": action}))
            except httpx.HTTPError as exc:
                st.error(f"API connection failed: {exc}")

    if st.button("Clear Chat"):
        try:
            _post_json(api_url, "/chat/reset", {})
        except httpx.HTTPError as exc:
            st.error(f"API connection failed: {exc}")
        st.session_state.chat_messages = []

    use_knowledge = st.toggle("Ground answers in the knowledge library", value=True)
    prompt = st.chat_input("Ask about tax, investments or planning...")
    if prompt:
        try:
            _show_reply(
                _post_json(api_url, "/chat", {"message": prompt, "use_knowledge": use_knowledge})
            )
        except httpx.HTTPError as exc:
            st.error(f"API connection failed: {exc}")

    for message in st.session_state.chat_messages:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])

with tab_calc:
    tax_tab, sip_tab, emi_tab, fd_tab = st.tabs(["Tax", "SIP", "EMI", "FD"])
    with tax_tab:
        income = st.text_input("Annual Income (₹)")
        deductions = st.text_input("Total Deductions (₹)", placeholder="80C, 80D, etc.")
        if st.button("Calculate Tax"):
            _calculator(
                api_url,
                "tax",
                {"gross_income": income, "total_deductions": deductions},
                {"tax": "Annual Tax", "monthly_tax": "Monthly Tax"},
            )
    with sip_tab:
        monthly = st.text_input("Monthly Investment (₹)")
        sip_years = st.text_input("Investment Period (Years)")
        expected = st.text_input("Expected Annual Return (%)", value="12")
        if st.button("Calculate SIP"):
            _calculator(
                api_url,
                "sip",
                {"monthly_amount": monthly, "years": sip_years, "annual_return_pct": expected},
                {
                    "maturity_amount": "Maturity Amount",
                    "total_investment": "Total Investment",
                    "total_gains": "Total Gains",
                },
            )
    with emi_tab:
        loan = st.text_input("Loan Amount (₹)")
        loan_rate = st.text_input("Interest Rate (% per annum)")
        tenure = st.text_input("Loan Tenure (Years)")
        if st.button("Calculate EMI"):
            _calculator(
                api_url,
                "emi",
                {"loan_amount": loan, "annual_rate_pct": loan_rate, "years": tenure},
                {
                    "emi": "Monthly EMI",
                    "total_amount": "Total Amount",
                    "total_interest": "Total Interest",
                },
            )
    with fd_tab:
        principal = st.text_input("Principal Amount (₹)")
        fd_rate = st.text_input("Interest Rate (% per annum)", key="fd_rate")
        fd_years = st.text_input("Time Period (Years)")
        if st.button("Calculate FD"):
            _calculator(
                api_url,
                "fd",
                {"principal": principal, "annual_rate_pct": fd_rate, "years": fd_years},
                {"maturity_amount": "Maturity Amount", "interest": "Interest Earned"},
            )

with tab_library:
    search = st.text_input("Search the knowledge library")
    try:
        if search:
            items = _get(api_url, "/knowledge/search", {"q": search}).json()
        else:
            items = _get(api_url, "/knowledge").json()
    except httpx.HTTPError as exc:
        st.error(f"API connection failed: {exc}")
        items = []
    for item in items:
        with st.expander(f"{item['title']} ({item['category']})"):
            st.markdown(item["content"])

with tab_docs:
    uploaded_files = st.file_uploader(
        "Upload Form 16, salary slips, loan or investment statements (PDF/CSV/TXT)",
        accept_multiple_files=True,
    )
    if st.button("Upload & Analyze") and uploaded_files:
        files = [
            ("files", (file.name, file.getvalue(), file.type or "application/octet-stream"))
            for file in uploaded_files
        ]
        try:
            with httpx.Client(timeout=120.0) as client:
                response = client.post(api_url.rstrip("/") + "/documents/files", files=files)
            payload = response.json()
        except httpx.HTTPError as exc:
            st.error(f"API connection failed: {exc}")
            payload = {}
        for rejected in payload.get("rejected", []):
            st.error(f"{rejected['name']}: {rejected['reason']}")
        for document in payload.get("documents", []):
            analysis = document["analysis"]
            st.subheader(document["name"])
            st.caption(
                f"{analysis['document_type']} - confidence {analysis['confidence']:.0%}"
            )
            if analysis.get("fields"):
                st.json(analysis["fields"])
            for insight in analysis.get("insights", []):
                st.info(insight)
            for recommendation in analysis.get("recommendations", []):
                st.markdown(f"- {recommendation}")

st.divider()
st.caption("Tip: Start the API with `uvicorn wealth_ai.app.main:app --port 8000`.")
