"""Interactive terminal dashboard for the patient API."""

import asyncio
import sys
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from ..core.config import ClientConfig, get_config
from ..core.logging import setup_logging
from ..domains.patient.models.patient import ALL_STATUSES, PATIENT_STATUSES, PatientStatus
from . import components
from .api import PatientApiClient
from .state import DashboardState, ModalMode

CANCEL = "/cancel"

HELP_TEXT = """
[bold]Available Commands:[/bold]
• /search <text> - Search by first or last name
• /clear - Clear the search
• /filter <status> - Filter by All, Inquiry, Onboarding, Active or Churned
• /add - Add a new patient
• /edit <id> - Edit a patient
• /delete <id> - Delete a patient
• /refresh - Reload the list
• /dismiss - Close the notification
• /help - Show this help message
• /quit or /exit - Exit

[bold]Forms:[/bold]
• Press Enter to keep the value shown in brackets
• Type /cancel at any prompt to close the form
"""


class PatientConsole:
    """Interactive dashboard driven by DashboardState"""

    def __init__(self, config: Optional[ClientConfig] = None, console: Optional[Console] = None):
        self.config = config or get_config().client
        self.console = console or Console()
        self.api = PatientApiClient(self.config)
        self.state = DashboardState(self.api, self.config)

    async def start(self) -> None:
        """Start the interactive session"""
        self.console.print(
            Panel.fit(
                "[bold blue]🏥 Patient Management[/bold blue]\n"
                f"Connected to {self.config.api_url}\n"
                "Type /help for commands.",
                border_style="blue",
            )
        )

        await self.state.fetch_patients()
        self.render()

        try:
            while True:
                command = await self._ask("\n[bold cyan]patients[/bold cyan]")
                if not await self.handle_command(command):
                    break
                self.render()
        except (KeyboardInterrupt, EOFError):
            pass
        finally:
            await self.state.aclose()
            await self.api.close()
            self.console.print("\n[yellow]👋 Goodbye![/yellow]")

    def render(self) -> None:
        self.console.print(components.dashboard(self.state))

    async def handle_command(self, raw: str) -> bool:
        """Apply one command; False means quit"""
        command, _, argument = raw.strip().partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command in ("/quit", "/exit", "quit", "exit"):
            return False
        if command == "/help":
            self.console.print(Panel(HELP_TEXT.strip(), title="[cyan]❓ Help[/cyan]", border_style="cyan"))
        elif command == "/search":
            self.state.set_search_term(argument)
            await self.state.debouncer.wait()
        elif command == "/clear":
            self.state.clear_search()
            await self.state.debouncer.wait()
        elif command == "/filter":
            self.state.set_status_filter(self._match_status(argument))
            await self.state.debouncer.wait()
        elif command == "/refresh":
            await self.state.fetch_patients()
        elif command == "/dismiss":
            self.state.close_toast()
        elif command == "/add":
            self.state.open_create()
            await self._run_form()
        elif command == "/edit":
            patient = self._lookup(argument)
            if patient:
                self.state.open_edit(patient)
                await self._run_form()
        elif command == "/delete":
            patient = self._lookup(argument)
            if patient:
                await self._run_delete(patient)
        elif command.startswith("/"):
            self.console.print(f"[yellow]Unknown command {command}. Type /help for commands.[/yellow]")
        elif command:
            # Plain text is treated as a search term
            self.state.set_search_term(raw.strip())
            await self.state.debouncer.wait()
        return True

    def _match_status(self, argument: str) -> str:
        for option in (ALL_STATUSES,) + PATIENT_STATUSES:
            if option.lower() == argument.lower():
                return option
        return ALL_STATUSES

    def _lookup(self, argument: str) -> Optional[Dict[str, Any]]:
        patient = self.state.find_patient(argument)
        if patient is None:
            self.console.print(f"[red]No patient with ID {argument or '?'} in the current list[/red]")
        return patient

    async def _run_form(self) -> None:
        """Collect the form until it submits or the user gives up"""
        initial = self.state.modal.patient or {"status": PatientStatus.INQUIRY.value, "address": {}}

        while True:
            self.console.print(components.modal(
                self.state.modal.title,
                components.patient_form(initial, self.state.modal.form_errors)
            ))
            form_data = await self._collect_form(initial)
            if form_data is None:
                self.state.close_modal()
                return

            if await self.state.submit_form(form_data):
                return

            initial = form_data
            if self.state.modal.form_errors:
                self.console.print(components.patient_form(form_data, self.state.modal.form_errors))
            else:
                self.render()
            if not await self._confirm("Edit and resubmit?"):
                self.state.close_modal()
                return

    async def _collect_form(self, initial: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        values: Dict[str, str] = {}
        for key, label, _ in components.FORM_FIELDS:
            hint = f" ({'/'.join(PATIENT_STATUSES)})" if key == "status" else ""
            hint = " (YYYY-MM-DD)" if key == "dob" else hint
            answer = await self._ask(
                f"{label}{hint}",
                default=components.form_value(initial, key)
            )
            if answer.strip() == CANCEL:
                return None
            values[key] = answer.strip()

        return {
            "firstName": values["firstName"],
            "middleName": values["middleName"] or None,
            "lastName": values["lastName"],
            "dob": values["dob"],
            "status": values["status"],
            "address": {key: values[key] for key in components.ADDRESS_FIELDS},
        }

    async def _run_delete(self, patient: Dict[str, Any]) -> None:
        self.state.request_delete(patient)
        self.console.print(components.modal(
            self.state.modal.title,
            components.delete_confirmation(patient)
        ))
        if await self._confirm("Delete this patient?"):
            await self.state.confirm_delete()
        if self.state.modal.mode is ModalMode.DELETE:
            self.state.close_modal()

    async def _ask(self, prompt: str, default: str = "") -> str:
        return await asyncio.to_thread(
            Prompt.ask, prompt, console=self.console, default=default, show_default=bool(default)
        )

    async def _confirm(self, prompt: str) -> bool:
        return await asyncio.to_thread(Confirm.ask, prompt, console=self.console, default=False)


def main() -> None:
    """Console entry point"""
    config = get_config()
    setup_logging(config.logging)

    client_config = config.client
    if len(sys.argv) > 1:
        client_config.api_url = sys.argv[1]

    asyncio.run(PatientConsole(client_config).start())


if __name__ == "__main__":
    main()
