"""
API gateway for the patient endpoints.

Wraps every outbound call so callers only ever see ApiError (the server
answered with a failure) or TransportError (it could not be reached).
"""

import asyncio
import logging
from typing import Optional, Dict, Any, List, Union

import aiohttp
import orjson

from ..core.config import ClientConfig, get_client_config
from ..core.exceptions import ApiError, TransportError

logger = logging.getLogger(__name__)

PatientId = Union[int, str]


class PatientApiClient:
    """Async client for /api/patients"""

    def __init__(self, config: Optional[ClientConfig] = None, session: Optional[aiohttp.ClientSession] = None):
        self.config = config or get_client_config()
        self.base_url = self.config.api_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "PatientApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                headers={"Content-Type": "application/json"},
                json_serialize=lambda x: orjson.dumps(x).decode()
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    async def get_all_patients(self, search_term: str = "", status_filter: str = "All") -> List[Dict[str, Any]]:
        params = {}
        if search_term and search_term.strip():
            params["search"] = search_term.strip()
        if status_filter and status_filter != "All":
            params["status"] = status_filter

        return await self._request(
            "GET", "/patients", "Failed to fetch patients", params=params
        )

    async def get_patient(self, patient_id: PatientId) -> Dict[str, Any]:
        return await self._request(
            "GET", f"/patients/{patient_id}", "Failed to fetch patient", patient_id=patient_id
        )

    async def create_patient(self, patient_data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "POST", "/patients", "Failed to create patient", json=patient_data
        )

    async def update_patient(self, patient_id: PatientId, patient_data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "PUT", f"/patients/{patient_id}", "Failed to update patient",
            patient_id=patient_id, json=patient_data
        )

    async def delete_patient(self, patient_id: PatientId) -> Dict[str, Any]:
        return await self._request(
            "DELETE", f"/patients/{patient_id}", "Failed to delete patient", patient_id=patient_id
        )

    async def _request(
        self,
        method: str,
        path: str,
        fallback_message: str,
        patient_id: Optional[PatientId] = None,
        **kwargs
    ) -> Any:
        url = f"{self.base_url}{path}"

        try:
            async with self.session.request(method, url, **kwargs) as response:
                raw = await response.read()
                status = response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"API Error: {method} {url} failed: {e}")
            raise TransportError() from e

        try:
            body = orjson.loads(raw) if raw else {}
        except orjson.JSONDecodeError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if status < 400:
            return body.get("data")

        logger.error(f"API Error: {method} {url} -> {status}: {body or raw[:200]!r}")
        raise self._normalize_error(status, body, fallback_message, patient_id)

    @staticmethod
    def _normalize_error(
        status: int,
        body: Dict[str, Any],
        fallback_message: str,
        patient_id: Optional[PatientId]
    ) -> ApiError:
        errors = body.get("errors") or []

        if status == 404 and patient_id is not None:
            return ApiError(status, f"Patient with ID {patient_id} not found")
        if status == 400 and errors:
            return ApiError(status, ", ".join(errors), errors=errors)
        return ApiError(status, body.get("message") or fallback_message)
