"""Presentational components for the terminal dashboard.

Each function turns state into a rich renderable and has no side effects.
"""

from typing import Any, Dict, List, Optional

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..domains.patient.models.patient import ALL_STATUSES, PATIENT_STATUSES
from ..domains.patient.validation import parse_date_of_birth
from .state import DashboardState, ModalMode, Toast, ToastType

STATUS_STYLES = {
    "Inquiry": "cyan",
    "Onboarding": "yellow",
    "Active": "green",
    "Churned": "red",
}

TOAST_ICONS = {
    ToastType.SUCCESS: ("✓", "green"),
    ToastType.ERROR: ("✕", "red"),
    ToastType.WARNING: ("⚠", "yellow"),
    ToastType.INFO: ("ℹ", "blue"),
}

FORM_FIELDS = [
    ("firstName", "First Name", True),
    ("middleName", "Middle Name", False),
    ("lastName", "Last Name", True),
    ("dob", "Date of Birth", True),
    ("status", "Status", True),
    ("street", "Street", True),
    ("city", "City", True),
    ("state", "State", True),
    ("zip", "Zip Code", True),
]

ADDRESS_FIELDS = ("street", "city", "state", "zip")


def format_date(value: Any) -> str:
    """Render a date of birth like 'Jan 01, 1990'; blank when missing"""
    parsed = parse_date_of_birth(value)
    if parsed is None:
        return str(value or "")
    return parsed.strftime("%b %d, %Y")


def format_name(patient: Dict[str, Any]) -> str:
    parts = [patient.get("firstName"), patient.get("middleName"), patient.get("lastName")]
    return " ".join(part for part in parts if part)


def format_address(address: Optional[Dict[str, Any]]) -> str:
    if not address:
        return "No address information"
    return ", ".join(str(address.get(key) or "") for key in ADDRESS_FIELDS)


def form_value(data: Dict[str, Any], key: str) -> str:
    """Read a form field, looking inside the nested address when needed"""
    if key in ADDRESS_FIELDS:
        return str((data.get("address") or {}).get(key) or "")
    return str(data.get(key) or "")


def status_badge(status: str) -> Text:
    return Text(status, style=f"bold {STATUS_STYLES.get(status, 'white')}")


def patient_table(patients: List[Dict[str, Any]], loading: bool = False) -> RenderableType:
    if loading:
        return Text("Loading Patients...", style="dim")
    if not patients:
        return Text("No patients found.", style="dim italic")

    table = Table(title="Patients", expand=True)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Date of Birth")
    table.add_column("Status")
    table.add_column("Address")

    for patient in patients:
        table.add_row(
            str(patient.get("id", "")),
            format_name(patient),
            format_date(patient.get("dob")),
            status_badge(patient.get("status", "")),
            format_address(patient.get("address")),
        )
    return table


def search_box(term: str) -> Text:
    text = Text("🔍 ")
    if term:
        text.append(term, style="bold")
        text.append("  (/clear to reset)", style="dim")
    else:
        text.append("Search patients by name...", style="dim")
    return text


def filter_bar(current: str) -> Text:
    text = Text("Filter by Status: ")
    for option in (ALL_STATUSES,) + PATIENT_STATUSES:
        label = "All Statuses" if option == ALL_STATUSES else option
        style = "reverse bold" if option == current else "dim"
        text.append(f" {label} ", style=style)
        text.append(" ")
    return text


def toast_view(toast: Optional[Toast]) -> Optional[RenderableType]:
    if toast is None:
        return None
    icon, color = TOAST_ICONS.get(toast.type, TOAST_ICONS[ToastType.SUCCESS])
    return Text(f"{icon} {toast.message}", style=f"bold {color}")


def patient_form(data: Dict[str, Any], errors: Optional[Dict[str, str]] = None) -> Table:
    errors = errors or {}
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_column("Error", style="red")

    for key, label, required in FORM_FIELDS:
        table.add_row(
            f"{label}{' *' if required else ''}",
            form_value(data, key),
            errors.get(key, ""),
        )
    return table


def delete_confirmation(patient: Dict[str, Any]) -> Text:
    return Text.assemble(
        "Are you sure you want to delete ",
        (format_name(patient), "bold"),
        "? This action cannot be undone.",
    )


def modal(title: str, body: RenderableType) -> Panel:
    return Panel(body, title=f"[bold]{title}[/bold]", border_style="blue", subtitle="/cancel to close")


def dashboard(state: DashboardState) -> Group:
    """Whole screen: header, search, filter, list, modal and toast"""
    parts: List[RenderableType] = [
        Text("Patient Management", style="bold blue"),
        Text("Manage your patient records efficiently.", style="dim"),
        search_box(state.search_term),
        filter_bar(state.status_filter),
        patient_table(state.patients, state.loading),
    ]

    if state.modal.mode is ModalMode.DELETE and state.modal.patient:
        parts.append(modal(state.modal.title, delete_confirmation(state.modal.patient)))
    elif state.modal.is_open:
        parts.append(modal(state.modal.title, patient_form(state.modal.patient or {}, state.modal.form_errors)))

    notification = toast_view(state.toast.current)
    if notification is not None:
        parts.append(notification)

    return Group(*parts)
