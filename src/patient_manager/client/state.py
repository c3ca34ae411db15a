"""
Dashboard state container.

Holds the patient list, search/filter criteria, the modal and the toast.
Search and filter changes go through a debouncer so that a burst of
keystrokes produces a single trailing fetch.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from ..core.config import ClientConfig, get_client_config
from ..core.exceptions import ApiError, TransportError
from ..domains.patient.models.patient import ALL_STATUSES
from ..domains.patient.validation import validate_patient_fields
from .api import PatientApiClient

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Cancellable delayed task; each call replaces the pending one.

    Only the waiting phase is cancellable. A callback that already fired
    runs to completion.
    """

    def __init__(self, delay_seconds: float):
        self.delay_seconds = delay_seconds
        self._task: Optional[asyncio.Task] = None
        self._waiting = False
        self._running: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """A timer is armed and has not fired yet"""
        return self._waiting and self._task is not None and not self._task.done()

    def call(self, callback: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        self.cancel()
        self._waiting = True
        self._task = asyncio.create_task(self._run(callback))
        self._running.add(self._task)
        self._task.add_done_callback(self._running.discard)
        return self._task

    async def _run(self, callback: Callable[[], Awaitable[Any]]) -> None:
        await asyncio.sleep(self.delay_seconds)
        self._waiting = False
        await callback()

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._waiting = False

    async def wait(self) -> None:
        """Block until the most recently scheduled call has finished"""
        task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise


class ToastType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Toast:
    message: str
    type: ToastType = ToastType.SUCCESS


class ToastState:
    """At most one notification; dismisses itself after duration_seconds"""

    def __init__(self, duration_seconds: float):
        self.duration_seconds = duration_seconds
        self.current: Optional[Toast] = None
        self._timer: Optional[asyncio.Task] = None

    def show(self, message: str, toast_type: ToastType = ToastType.SUCCESS) -> Toast:
        self._cancel_timer()
        self.current = Toast(message, toast_type)
        self._timer = asyncio.create_task(self._expire(self.current))
        return self.current

    async def _expire(self, toast: Toast) -> None:
        await asyncio.sleep(self.duration_seconds)
        if self.current is toast:
            self.current = None

    def close(self) -> None:
        self._cancel_timer()
        self.current = None

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None


class ModalMode(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


@dataclass
class ModalState:
    mode: ModalMode = ModalMode.CLOSED
    patient: Optional[Dict[str, Any]] = None
    form_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return self.mode is not ModalMode.CLOSED

    @property
    def title(self) -> str:
        return {
            ModalMode.CREATE: "Add New Patient",
            ModalMode.EDIT: "Edit Patient",
            ModalMode.DELETE: "Confirm Deletion",
        }.get(self.mode, "")


class DashboardState:
    """Authoritative client-side view of the patient list"""

    def __init__(self, api: PatientApiClient, config: Optional[ClientConfig] = None):
        self.api = api
        self.config = config or get_client_config()

        self.patients: List[Dict[str, Any]] = []
        self.search_term = ""
        self.status_filter = ALL_STATUSES
        self.loading = False
        self.modal = ModalState()
        self.toast = ToastState(self.config.toast_duration_ms / 1000)
        self.debouncer = Debouncer(self.config.search_debounce_ms / 1000)

    # Search and filter

    def set_search_term(self, term: str) -> None:
        self.search_term = term
        self.schedule_fetch()

    def clear_search(self) -> None:
        self.set_search_term("")

    def set_status_filter(self, status: str) -> None:
        self.status_filter = status or ALL_STATUSES
        self.schedule_fetch()

    def schedule_fetch(self) -> asyncio.Task:
        return self.debouncer.call(self.fetch_patients)

    async def fetch_patients(self) -> None:
        self.loading = True
        try:
            self.patients = await self.api.get_all_patients(self.search_term, self.status_filter) or []
        except (ApiError, TransportError) as e:
            logger.error(f"Error fetching patients: {e}")
            self.show_toast("Failed to load patients. Please try again.", ToastType.ERROR)
        finally:
            self.loading = False

    # Modal flows

    def open_create(self) -> None:
        self.modal = ModalState(mode=ModalMode.CREATE)

    def open_edit(self, patient: Dict[str, Any]) -> None:
        self.modal = ModalState(mode=ModalMode.EDIT, patient=patient)

    def request_delete(self, patient: Dict[str, Any]) -> None:
        self.modal = ModalState(mode=ModalMode.DELETE, patient=patient)

    def close_modal(self) -> None:
        self.modal = ModalState()

    async def submit_form(self, form_data: Dict[str, Any]) -> bool:
        """Validate locally, then create or update; True on success"""
        errors = validate_patient_fields(form_data)
        self.modal.form_errors = errors
        if errors:
            return False

        editing = self.modal.mode is ModalMode.EDIT and self.modal.patient is not None
        try:
            if editing:
                await self.api.update_patient(self.modal.patient["id"], form_data)
                self.show_toast("Patient updated successfully!")
            else:
                await self.api.create_patient(form_data)
                self.show_toast("Patient created successfully!")
        except (ApiError, TransportError) as e:
            action = "update" if editing else "create"
            logger.error(f"Error during patient {action}: {e}")
            self.show_toast(str(e) or f"Failed to {action} patient", ToastType.ERROR)
            return False

        self.close_modal()
        await self.fetch_patients()
        return True

    async def confirm_delete(self) -> bool:
        patient = self.modal.patient
        if self.modal.mode is not ModalMode.DELETE or patient is None:
            return False

        try:
            await self.api.delete_patient(patient["id"])
        except (ApiError, TransportError) as e:
            logger.error(f"Error deleting patient: {e}")
            self.show_toast(str(e) or "Failed to delete patient", ToastType.ERROR)
            return False

        self.show_toast("Patient deleted successfully.")
        self.close_modal()
        await self.fetch_patients()
        return True

    # Notifications

    def show_toast(self, message: str, toast_type: ToastType = ToastType.SUCCESS) -> Toast:
        return self.toast.show(message, toast_type)

    def close_toast(self) -> None:
        self.toast.close()

    def find_patient(self, patient_id: Any) -> Optional[Dict[str, Any]]:
        for patient in self.patients:
            if str(patient.get("id")) == str(patient_id):
                return patient
        return None

    async def aclose(self) -> None:
        self.debouncer.cancel()
        self.toast.close()
