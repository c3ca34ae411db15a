"""Tests for the rich dashboard components and console commands"""

import pytest
from rich.console import Console

from patient_manager.client import components
from patient_manager.client.console import PatientConsole
from patient_manager.client.state import DashboardState, Toast, ToastType
from patient_manager.core.config import ClientConfig

from conftest import FakeApi, make_patient

CLIENT_CONFIG = ClientConfig(api_url="http://test/api", search_debounce_ms=20, toast_duration_ms=50)


def render(renderable) -> str:
    console = Console(record=True, width=200, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestFormatting:
    def test_format_date(self):
        assert components.format_date("1990-01-01") == "Jan 01, 1990"
        assert components.format_date(None) == ""
        assert components.format_date("someday") == "someday"

    def test_format_name_skips_missing_middle(self):
        assert components.format_name(make_patient(middleName=None)) == "Jane Doe"
        assert components.format_name(make_patient(middleName="Ann")) == "Jane Ann Doe"

    def test_format_address(self):
        assert components.format_address(make_patient()["address"]) == "1 Main St, Springfield, IL, 62704"
        assert components.format_address(None) == "No address information"

    def test_form_value_reads_nested_address(self):
        patient = make_patient()
        assert components.form_value(patient, "zip") == "62704"
        assert components.form_value(patient, "middleName") == ""


class TestRendering:
    def test_table_lists_patients(self):
        text = render(components.patient_table([dict(make_patient(), id=3)]))

        assert "Jane Doe" in text
        assert "Jan 01, 1990" in text
        assert "Active" in text
        assert "Springfield" in text

    def test_loading_and_empty_states(self):
        assert "Loading Patients..." in render(components.patient_table([], loading=True))
        assert "No patients found." in render(components.patient_table([]))

    def test_form_shows_errors(self):
        text = render(components.patient_form({}, {"firstName": "First name is required"}))

        assert "First Name *" in text
        assert "First name is required" in text

    def test_delete_confirmation(self):
        text = render(components.delete_confirmation(make_patient()))

        assert "Are you sure you want to delete Jane Doe? This action cannot be undone." in text

    def test_dashboard_with_modal_and_toast(self):
        state = DashboardState(FakeApi(), CLIENT_CONFIG)
        state.request_delete(dict(make_patient(), id=1))
        state.toast.current = Toast("Patient deleted successfully.", ToastType.SUCCESS)

        text = render(components.dashboard(state))

        assert "Patient Management" in text
        assert "Search patients by name..." in text
        assert "All Statuses" in text
        assert "Confirm Deletion" in text
        assert "Patient deleted successfully." in text


@pytest.fixture
async def patient_console():
    app = PatientConsole(CLIENT_CONFIG, console=Console(record=True, width=200))
    app.state = DashboardState(FakeApi([dict(make_patient(), id=1)]), CLIENT_CONFIG)
    yield app
    await app.state.aclose()
    await app.api.close()


class TestConsoleCommands:
    async def test_quit(self, patient_console):
        assert await patient_console.handle_command("/quit") is False

    async def test_filter_matches_case_insensitively(self, patient_console):
        assert await patient_console.handle_command("/filter churned") is True

        assert patient_console.state.status_filter == "Churned"
        assert patient_console.state.api.calls == [("list", "", "Churned")]

    async def test_unknown_filter_falls_back_to_all(self, patient_console):
        await patient_console.handle_command("/filter pending")

        assert patient_console.state.status_filter == "All"

    async def test_plain_text_searches(self, patient_console):
        await patient_console.handle_command("doe")

        assert patient_console.state.search_term == "doe"
        assert patient_console.state.api.calls == [("list", "doe", "All")]

    async def test_delete_confirmed(self, patient_console):
        await patient_console.state.fetch_patients()

        async def confirm(prompt):
            return True

        patient_console._confirm = confirm
        await patient_console.handle_command("/delete 1")

        assert ("delete", 1) in patient_console.state.api.calls
        assert not patient_console.state.modal.is_open

    async def test_delete_unknown_id(self, patient_console):
        await patient_console.handle_command("/delete 99")

        assert "No patient with ID 99" in patient_console.console.export_text()
        assert patient_console.state.api.calls == []

    async def test_unknown_command_is_not_a_search(self, patient_console):
        assert await patient_console.handle_command("/hlep") is True

        assert "Unknown command /hlep" in patient_console.console.export_text()
        assert patient_console.state.search_term == ""
        assert patient_console.state.api.calls == []
