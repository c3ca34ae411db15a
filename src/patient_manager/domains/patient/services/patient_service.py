"""
Patient service - business logic layer
"""

from typing import Optional, List, Dict, Any, Union
from datetime import date
import logging

from ..models.patient import ALL_STATUSES, PatientResponse
from ..repositories.patient_repository import PatientRepository
from ..validation import validate_patient, validate_patient_id
from ....core.exceptions import NotFoundError, ValidationError


logger = logging.getLogger(__name__)


class PatientService:
    """Service layer for patient operations"""

    def __init__(self, repository: PatientRepository, today: Optional[date] = None):
        self.repository = repository
        self._today = today

    async def list_patients(
        self,
        search_term: Optional[str] = None,
        status_filter: Optional[str] = None
    ) -> List[PatientResponse]:
        """Search by name substring and filter by status; "All" disables the filter"""
        search_term = (search_term or "").strip() or None
        status_filter = (status_filter or "").strip() or None
        if status_filter == ALL_STATUSES:
            status_filter = None

        patients = await self.repository.find_all(search_term, status_filter)
        return [patient.to_response() for patient in patients]

    async def get_patient(self, patient_id: Union[int, str]) -> PatientResponse:
        """Fetch one patient or raise NotFoundError"""
        key = self._parse_id(patient_id)

        patient = await self.repository.find_by_id(key)
        if not patient:
            raise NotFoundError(key)

        return patient.to_response()

    async def create_patient(self, record: Dict[str, Any]) -> PatientResponse:
        """Validate and insert a new patient"""
        self._validate(record)

        patient = await self.repository.insert(record)
        return patient.to_response()

    async def update_patient(self, patient_id: Union[int, str], record: Dict[str, Any]) -> PatientResponse:
        """Validate and fully replace an existing patient"""
        key = self._parse_id(patient_id)
        self._validate(record)

        patient = await self.repository.update(key, record)
        if not patient:
            raise NotFoundError(key)

        return patient.to_response()

    async def delete_patient(self, patient_id: Union[int, str]) -> PatientResponse:
        """Remove a patient and return what was deleted"""
        key = self._parse_id(patient_id)

        patient = await self.repository.remove(key)
        if not patient:
            raise NotFoundError(key)

        return patient.to_response()

    def _validate(self, record: Dict[str, Any]) -> None:
        errors = validate_patient(record, today=self._today)
        if errors:
            logger.info(f"Rejected patient record: {'; '.join(errors)}")
            raise ValidationError(errors)

    @staticmethod
    def _parse_id(patient_id: Union[int, str]) -> int:
        errors = validate_patient_id(patient_id)
        if errors:
            raise ValidationError(errors)
        return int(patient_id)
