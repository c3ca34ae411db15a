"""
Error taxonomy shared by the API server and the client gateway
"""

from typing import List, Optional, Union


class PatientManagerError(Exception):
    """Base class for all application errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PatientManagerError):
    """Client-correctable input problem; carries every violation found"""

    status_code = 400

    def __init__(self, errors: List[str], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = list(errors)

    def __str__(self) -> str:
        return ", ".join(self.errors) or self.message


class NotFoundError(PatientManagerError):
    """No record exists for the requested identifier"""

    status_code = 404

    def __init__(self, patient_id: Union[int, str]):
        super().__init__(f"Patient with ID {patient_id} not found")
        self.patient_id = patient_id


class StorageError(PatientManagerError):
    """Constraint or connectivity failure in the persistence layer"""

    status_code = 500


class TransportError(PatientManagerError):
    """Network or timeout failure talking to the API"""

    def __init__(self, message: str = "Unable to reach the server. Please check your connection and try again."):
        super().__init__(message)


class ApiError(PatientManagerError):
    """The API answered with a non-success status"""

    def __init__(self, status_code: int, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []
