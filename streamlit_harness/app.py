from __future__ import annotations

# Ensure repo root is on sys.path when running via `streamlit run`.
import sys
from pathlib import Path as _Path
_REPO_ROOT = _Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import logging
from pathlib import Path
from typing import Dict, List, Optional

import streamlit as st

from steepbook.config import configure_logging, load_config
from steepbook.library import SessionLibrary
from steepbook.messages import MESSAGES, format_message
from steepbook.models import OPTIONAL_FIELDS, Session, custom_field_key, custom_field_label
from steepbook.storage import SessionStore
from steepbook.timeutil import format_display_datetime, now_local_string

logger = logging.getLogger(__name__)

FIELD_LABELS: Dict[str, str] = {
    "datetime": "Date & Time",
    "teaName": "Tea Name",
    "brewingVessel": "Brewing Vessel",
    "teaProducer": "Producer",
    "origin": "Origin",
    "purchaseLocation": "Purchase Location",
    "dryLeaf": "Dry Leaf",
    "wetLeaf": "Wet Leaf",
    "additionalNotes": "Additional Notes",
}

TEXTAREA_FIELDS = {"dryLeaf", "wetLeaf", "additionalNotes"}

CARD_FIELDS = (
    "teaName", "teaProducer", "origin", "purchaseLocation",
    "brewingVessel", "dryLeaf", "wetLeaf", "additionalNotes",
)

MIME_TYPES = {"csv": "text/csv", "json": "application/json"}


class SessionStateNotifier:
    """Queue notifications in session state so they survive reruns."""

    def success(self, message: str) -> None:
        st.session_state.notifications.append(("success", message))

    def failure(self, message: str) -> None:
        st.session_state.notifications.append(("error", message))


def init_session_state() -> None:
    """Initialize app session state."""
    if "notifications" not in st.session_state:
        st.session_state.notifications = []
    if "steep_count" not in st.session_state:
        st.session_state.steep_count = 1
    if "custom_labels" not in st.session_state:
        st.session_state.custom_labels = []
    if "pending_delete" not in st.session_state:
        st.session_state.pending_delete = None
    if "form_datetime" not in st.session_state:
        st.session_state.form_datetime = now_local_string()


def get_library() -> SessionLibrary:
    """Get or initialize the session library singleton."""
    if "library" not in st.session_state or not isinstance(st.session_state.library, SessionLibrary):
        settings = load_config()
        configure_logging(settings.log_level)
        library = SessionLibrary(
            store=SessionStore(Path(settings.storage_dir)),
            notifier=SessionStateNotifier(),
        )
        library.load()
        st.session_state.library = library
    return st.session_state.library


def render_notifications() -> None:
    for kind, message in st.session_state.notifications:
        if kind == "success":
            st.success(message)
        else:
            st.error(message)
    st.session_state.notifications = []


# Form state helpers. Widget-bound keys may only be written from callbacks,
# which run before the widgets of the next script run are created.

def reset_form() -> None:
    """Clear form widgets back to a fresh session."""
    for name in FIELD_LABELS:
        st.session_state[f"form_{name}"] = ""
    st.session_state.form_datetime = now_local_string()
    for i in range(1, st.session_state.steep_count + 1):
        st.session_state.pop(f"form_steep-{i}", None)
    for label in st.session_state.custom_labels:
        st.session_state.pop(f"form_{custom_field_key(label)}", None)
    st.session_state.steep_count = 1
    st.session_state.custom_labels = []


def fill_form(session: Session) -> None:
    """Load a session into the form widgets for editing."""
    reset_form()
    data = session.to_dict()
    for name in FIELD_LABELS:
        st.session_state[f"form_{name}"] = data[name]

    st.session_state.steep_count = max(1, len(session.steeps))
    for i, steep in enumerate(session.steeps, start=1):
        st.session_state[f"form_steep-{i}"] = steep

    labels: List[str] = []
    for custom in session.custom_fields:
        label = custom_field_label(custom.name)
        if custom_field_key(label) in {custom_field_key(seen) for seen in labels}:
            continue
        labels.append(label)
        st.session_state[f"form_{custom_field_key(label)}"] = custom.value
    st.session_state.custom_labels = labels


def collect_form() -> Dict[str, str]:
    """Flatten form widgets into form data keyed like the stored fields."""
    values: Dict[str, str] = {
        name: st.session_state.get(f"form_{name}", "") for name in FIELD_LABELS
    }
    for i in range(1, st.session_state.steep_count + 1):
        values[f"steep-{i}"] = st.session_state.get(f"form_steep-{i}", "")
    for label in st.session_state.custom_labels:
        key = custom_field_key(label)
        values[key] = st.session_state.get(f"form_{key}", "")
    return values


def on_add_steep() -> None:
    st.session_state.steep_count += 1


def on_remove_steep() -> None:
    st.session_state.pop(f"form_steep-{st.session_state.steep_count}", None)
    st.session_state.steep_count -= 1


def on_add_custom_field() -> None:
    label = (st.session_state.get("new_custom_label") or "").strip()
    existing = {custom_field_key(name) for name in st.session_state.custom_labels}
    if label and custom_field_key(label) not in existing:
        st.session_state.custom_labels.append(label)
    st.session_state.new_custom_label = ""


def on_save(library: SessionLibrary) -> None:
    if library.save_session(Session.from_form(collect_form())):
        reset_form()


def on_reset(library: SessionLibrary) -> None:
    library.cancel_edit()
    reset_form()


def on_edit(library: SessionLibrary, index: int) -> None:
    fill_form(library.start_edit(index))


def on_request_delete(index: int) -> None:
    st.session_state.pending_delete = index


def on_confirm_delete(library: SessionLibrary, index: int) -> None:
    library.delete_session(index)
    st.session_state.pending_delete = None


def on_import(library: SessionLibrary) -> None:
    uploaded = st.session_state.get("import_file")
    if uploaded is None:
        return
    fmt = "json" if uploaded.name.lower().endswith(".json") else "csv"
    text = read_upload(uploaded)
    if text is None:
        library.notifier.failure(format_message(fmt, "IMPORT_ERROR"))
        return
    confirmed = bool(st.session_state.get("import_confirmed"))
    if library.import_text(text, fmt, confirm=lambda _prompt: confirmed) is None:
        library.notifier.failure(MESSAGES["IMPORT_CANCELLED"])
    else:
        reset_form()
    st.session_state.import_confirmed = False


def render_session_form(library: SessionLibrary) -> None:
    editing = library.editing_index is not None
    st.subheader("Edit Session" if editing else "New Session")

    st.text_input(FIELD_LABELS["datetime"], key="form_datetime", help="YYYY-MM-DDTHH:MM")
    st.text_input(FIELD_LABELS["teaName"], key="form_teaName")
    for name in OPTIONAL_FIELDS:
        if name in TEXTAREA_FIELDS:
            st.text_area(FIELD_LABELS[name], key=f"form_{name}", height=80)
        else:
            st.text_input(FIELD_LABELS[name], key=f"form_{name}")

    st.markdown("**Steeps**")
    for i in range(1, st.session_state.steep_count + 1):
        st.text_area(f"Steep {i}", key=f"form_steep-{i}", height=68)
    col_add, col_remove = st.columns(2)
    with col_add:
        st.button("Add Steep", on_click=on_add_steep)
    with col_remove:
        st.button(
            "Remove Last Steep",
            on_click=on_remove_steep,
            disabled=st.session_state.steep_count <= 1,
        )

    if st.session_state.custom_labels:
        st.markdown("**Custom Fields**")
    for label in st.session_state.custom_labels:
        st.text_area(f"{label}:", key=f"form_{custom_field_key(label)}", height=68)

    col_label, col_btn = st.columns([3, 1])
    with col_label:
        st.text_input("Custom field name", key="new_custom_label")
    with col_btn:
        st.button("Add Field", on_click=on_add_custom_field)

    col_save, col_reset = st.columns(2)
    with col_save:
        st.button(
            "Update Session" if editing else "Save Session",
            type="primary",
            on_click=on_save,
            args=(library,),
        )
    with col_reset:
        st.button("Cancel" if editing else "Reset", on_click=on_reset, args=(library,))


def render_session_card(library: SessionLibrary, session: Session, index: int) -> None:
    date = session.datetime.split("T")[0]
    title = f"{date} – {session.tea_producer} – {session.tea_name}"
    with st.expander(title, expanded=st.session_state.pending_delete == index):
        st.markdown(f"**Date & Time:** {format_display_datetime(session.datetime)}")
        for name in CARD_FIELDS:
            st.markdown(f"**{FIELD_LABELS[name]}:** {session.get_field(name)}")

        for i, steep in enumerate(session.steeps, start=1):
            st.markdown(f"**Steep {i}:** {steep}")

        for custom in session.custom_fields:
            st.markdown(f"**{custom_field_label(custom.name)}:** {custom.value}")

        col_edit, col_delete = st.columns(2)
        with col_edit:
            st.button("Edit", key=f"edit_{index}", on_click=on_edit, args=(library, index))
        with col_delete:
            if st.session_state.pending_delete == index:
                st.warning(MESSAGES["DELETE_SESSION_CONFIRM"])
                st.button(
                    "Yes, delete",
                    key=f"confirm_delete_{index}",
                    on_click=on_confirm_delete,
                    args=(library, index),
                )
            else:
                st.button(
                    "Delete",
                    key=f"delete_{index}",
                    on_click=on_request_delete,
                    args=(index,),
                )


def render_session_list(library: SessionLibrary) -> None:
    st.subheader(f"Sessions ({len(library.sessions)})")
    if not library.sessions:
        st.caption("No sessions yet.")
        return
    for index, session in enumerate(library.sessions):
        render_session_card(library, session, index)


def download_sink(content: str, filename: str, kind: str) -> None:
    """File export sink: offer the encoded file as a download."""
    st.download_button(
        label=f"Download {filename}",
        data=content,
        file_name=filename,
        mime=MIME_TYPES[kind],
        key=f"download_{kind}",
    )


def read_upload(uploaded) -> Optional[str]:
    """Read an uploaded file as text, None if it is not valid UTF-8."""
    try:
        return uploaded.getvalue().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.error("Could not decode %s: %s", uploaded.name, e)
        return None


def render_exchange_sidebar(library: SessionLibrary) -> None:
    with st.sidebar:
        st.header("Export")
        library.export("csv", download_sink)
        library.export("json", download_sink)

        st.divider()
        st.header("Import")
        st.file_uploader("Sessions file", type=["csv", "json"], key="import_file")
        st.checkbox(MESSAGES["IMPORT_OVERWRITE_CONFIRM"], key="import_confirmed")
        st.button(
            "Import",
            on_click=on_import,
            args=(library,),
            disabled=st.session_state.get("import_file") is None,
        )


def main() -> None:
    st.set_page_config(page_title="Steepbook", layout="wide")
    init_session_state()
    library = get_library()

    st.title("Steepbook")
    st.caption("Tea session log")
    render_notifications()

    render_exchange_sidebar(library)

    col_form, col_list = st.columns([1, 1])
    with col_form:
        render_session_form(library)
    with col_list:
        render_session_list(library)


if __name__ == "__main__":
    main()
