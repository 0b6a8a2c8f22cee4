"""Business Application -- Streamlit dashboard.

Renders the pharmacy business application form from the controller's
view: business type selector, business and contact fields, the pharmacy
and pharmacist lists, and the Apply/Accept button. Notifications become
toasts; a successful submission replaces the form with the confirmation.
"""

from __future__ import annotations

import html as html_mod
import json
import sys
from pathlib import Path

import streamlit as st

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from app.form_controller import FormController
from app.journal_channel import JournalChannel
from app.schema import PriorValues
from app.validation import FormEngineError, Notification, Severity

# -- Page config --------------------------------------------------------------

st.set_page_config(
    page_title="Business Application",
    layout="centered",
)

# -- CSS ----------------------------------------------------------------------

st.markdown(
    """
<style>
#MainMenu, footer,
div[data-testid="stToolbar"] { display: none !important; }

.section-label {
    font-size: 0.78rem;
    font-weight: 600;
    color: #5a6a85;
    text-transform: uppercase;
    letter-spacing: 0.04em;
    margin-bottom: 4px;
    margin-top: 12px;
}

.field-error {
    font-size: 0.82rem;
    color: #c62828;
    margin-top: -8px;
    margin-bottom: 8px;
}

.confirmation {
    background: #e8f5e9;
    border: 1px solid #a5d6a7;
    border-radius: 8px;
    color: #1b5e20;
    padding: 20px 24px;
    margin: 2rem 0;
}
</style>
""",
    unsafe_allow_html=True,
)

# -- Session state defaults ---------------------------------------------------

_DEFAULTS: dict = {
    "controller": None,
    "notifications": [],
    "widget_nonce": 0,
}
for _k, _v in _DEFAULTS.items():
    if _k not in st.session_state:
        st.session_state[_k] = _v


# -- Helpers ------------------------------------------------------------------

def _notify(notification: Notification) -> None:
    st.session_state.notifications.append(notification)


def _new_controller(prior: PriorValues | None = None) -> FormController:
    channel = JournalChannel(handle="dashboard", on_detach=lambda _handle: _bump_nonce())
    return FormController(channel, notify=_notify, prior=prior)


def _bump_nonce() -> None:
    """Give every widget a fresh key so stale widget state is dropped."""
    st.session_state.widget_nonce += 1


def _key(*parts) -> str:
    return "_".join(str(p) for p in (*parts, st.session_state.widget_nonce))


def _flush_notifications() -> None:
    for n in st.session_state.notifications:
        icon = "✅" if n.severity is Severity.SUCCESS else "⚠️"
        st.toast(n.message, icon=icon)
    st.session_state.notifications = []


def _field_error(view: dict) -> None:
    ctrl: FormController = st.session_state.controller
    failure = ctrl.last_failure
    if failure is None or failure.focus != view["id"]:
        return
    st.markdown(
        f'<div class="field-error">{html_mod.escape(failure.message)}</div>',
        unsafe_allow_html=True,
    )


def _render_input(view: dict, on_change) -> None:
    """One text input bound to a field view; edits are pushed to *on_change*."""
    ctrl: FormController = st.session_state.controller
    label = view["label"]
    if ctrl.focus == view["id"]:
        label = f"{label} ←"
    value = st.text_input(
        label,
        value=view["value"],
        placeholder=view["placeholder"].strip() or None,
        max_chars=view["max_length"],
        key=_key("field", view["id"]),
    )
    if value != view["value"]:
        on_change(value)
    elif view["status"] == "invalid":
        _field_error(view)


if st.session_state.controller is None:
    st.session_state.controller = _new_controller()

ctrl: FormController = st.session_state.controller

# -- Sidebar ------------------------------------------------------------------

with st.sidebar:
    st.markdown("#### Application")
    if st.button("New application", use_container_width=True):
        st.session_state.controller = _new_controller()
        _bump_nonce()
        st.rerun()

    uploaded = st.file_uploader("Load application for review", type=["json"])
    if uploaded is not None and st.button("Load", use_container_width=True):
        try:
            prior = PriorValues.from_dict(json.loads(uploaded.getvalue()))
            st.session_state.controller = _new_controller(prior)
            _bump_nonce()
            st.rerun()
        except (ValueError, FormEngineError) as e:
            st.error(f"Could not load application: {e}")

# -- Main area ----------------------------------------------------------------

view = ctrl.view()

if ctrl.detached:
    st.markdown(
        f'<div class="confirmation">{html_mod.escape(view["confirmation"] or "")}</div>',
        unsafe_allow_html=True,
    )
    _flush_notifications()
    st.stop()

categories = view["categories"]
keys = [c["key"] for c in categories]
names = {c["key"]: c["name"] for c in categories}
selected = st.radio(
    "Business type",
    keys,
    index=keys.index(view["category"]) if view["category"] in keys else None,
    format_func=lambda k: names[k],
    horizontal=True,
    key=_key("businessType"),
)
if selected and selected != view["category"]:
    ctrl.select_category(selected)
    st.rerun()

if view["fields"]:
    st.markdown('<div class="section-label">Business</div>', unsafe_allow_html=True)
    for field_view in view["fields"]:
        _render_input(field_view, lambda v, k=field_view["id"]: ctrl.set_field(k, v))

st.markdown('<div class="section-label">Contact</div>', unsafe_allow_html=True)
for field_view in view["contact"]:
    _render_input(field_view, lambda v, k=field_view["id"]: ctrl.set_field(k, v))

for coll in view["collections"]:
    name = coll["name"]
    st.markdown(f'<div class="section-label">{html_mod.escape(coll["label"])}</div>', unsafe_allow_html=True)

    for row in coll["entries"]:
        cols = st.columns([4] * len(row["fields"]) + [1])
        for col, field_view in zip(cols, row["fields"]):
            component = field_view["id"].rsplit(".", 1)[-1]
            with col:
                _render_input(
                    field_view,
                    lambda v, i=row["index"], c=component, n=name: ctrl.edit_entry(n, i, c, v),
                )
        with cols[-1]:
            if st.button("−", key=_key("remove", name, row["index"])):
                ctrl.remove_entry(name, row["index"])
                _bump_nonce()
                st.rerun()

    cols = st.columns([4] * len(coll["draft"]) + [2])
    for col, field_view in zip(cols, coll["draft"]):
        component = field_view["id"].rsplit(".", 1)[-1]
        with col:
            _render_input(field_view, lambda v, c=component, n=name: ctrl.edit_draft(n, c, v))
    with cols[-1]:
        # Draft edits above have already reached the controller on this run
        can_add = ctrl.collection(name).can_add
        if st.button(coll["add_label"], key=_key("add", name), type="primary", disabled=not can_add):
            result = ctrl.add_entry(name)
            if result is not None and result.ok:
                _bump_nonce()
            st.rerun()

st.markdown("---")
if st.button(view["submit_label"], type="primary", use_container_width=True):
    with st.spinner("Sending..."):
        ctrl.submit()
    st.rerun()

_flush_notifications()
