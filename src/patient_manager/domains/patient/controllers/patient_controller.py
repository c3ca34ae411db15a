"""
Patient controller - HTTP endpoint handlers
"""

from typing import Optional
from fastapi import APIRouter, Query, Path, Depends
from fastapi.responses import JSONResponse
import logging

from ..models.patient import PatientPayload
from ..services.patient_service import PatientService
from ....core.dependencies import get_patient_service
from ....core.exceptions import NotFoundError, PatientManagerError, ValidationError
from ....core.metrics import patient_operations
from ....core.responses import error_response, success_response


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/patients", tags=["patients"])


def _validation_failed(operation: str, error: ValidationError) -> JSONResponse:
    patient_operations.labels(operation=operation, outcome="invalid").inc()
    return error_response(error.status_code, error.message, errors=error.errors)


def _not_found(operation: str, error: NotFoundError) -> JSONResponse:
    patient_operations.labels(operation=operation, outcome="not_found").inc()
    return error_response(error.status_code, error.message)


def _failed(operation: str, message: str, error: Exception) -> JSONResponse:
    patient_operations.labels(operation=operation, outcome="error").inc()
    status_code = error.status_code if isinstance(error, PatientManagerError) else 500
    return error_response(status_code, message, error=str(error))


@router.get("")
async def list_patients(
    search: Optional[str] = Query(None, description="Case-insensitive first/last name substring"),
    status: Optional[str] = Query(None, description="Exact status, or All"),
    service: PatientService = Depends(get_patient_service)
) -> JSONResponse:
    """
    List patients ordered by last name, then first name
    """
    try:
        patients = await service.list_patients(search, status)

        patient_operations.labels(operation="list", outcome="success").inc()
        return success_response(
            "Patients retrieved successfully",
            data=patients,
            count=len(patients)
        )

    except Exception as e:
        logger.error(f"Error retrieving patients: {e}")
        return _failed("list", "Error retrieving patients", e)


@router.get("/{patient_id}")
async def get_patient(
    patient_id: str = Path(..., description="Patient ID"),
    service: PatientService = Depends(get_patient_service)
) -> JSONResponse:
    """
    Fetch a patient by id
    """
    try:
        patient = await service.get_patient(patient_id)

        patient_operations.labels(operation="get", outcome="success").inc()
        return success_response("Patient retrieved successfully", data=patient)

    except ValidationError as e:
        return _validation_failed("get", e)
    except NotFoundError as e:
        return _not_found("get", e)
    except Exception as e:
        logger.error(f"Error fetching patient {patient_id}: {e}")
        return _failed("get", "Error retrieving patient", e)


@router.post("")
async def create_patient(
    payload: PatientPayload,
    service: PatientService = Depends(get_patient_service)
) -> JSONResponse:
    """
    Create a patient

    Every validation violation is reported at once in `errors`.
    """
    try:
        patient = await service.create_patient(payload.to_record())

        patient_operations.labels(operation="create", outcome="success").inc()
        return success_response("Patient created successfully", data=patient, status_code=201)

    except ValidationError as e:
        return _validation_failed("create", e)
    except Exception as e:
        logger.error(f"Error creating patient: {e}")
        return _failed("create", "Error creating patient", e)


@router.put("/{patient_id}")
async def update_patient(
    payload: PatientPayload,
    patient_id: str = Path(..., description="Patient ID"),
    service: PatientService = Depends(get_patient_service)
) -> JSONResponse:
    """
    Replace every mutable field of a patient
    """
    try:
        patient = await service.update_patient(patient_id, payload.to_record())

        patient_operations.labels(operation="update", outcome="success").inc()
        return success_response("Patient updated successfully", data=patient)

    except ValidationError as e:
        return _validation_failed("update", e)
    except NotFoundError as e:
        return _not_found("update", e)
    except Exception as e:
        logger.error(f"Error updating patient {patient_id}: {e}")
        return _failed("update", "Error updating patient", e)


@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: str = Path(..., description="Patient ID"),
    service: PatientService = Depends(get_patient_service)
) -> JSONResponse:
    """
    Delete a patient

    The removed record is returned in the same shape as every other endpoint.
    """
    try:
        patient = await service.delete_patient(patient_id)

        patient_operations.labels(operation="delete", outcome="success").inc()
        return success_response("Patient deleted successfully", data=patient)

    except ValidationError as e:
        return _validation_failed("delete", e)
    except NotFoundError as e:
        return _not_found("delete", e)
    except Exception as e:
        logger.error(f"Error deleting patient {patient_id}: {e}")
        return _failed("delete", "Error deleting patient", e)
