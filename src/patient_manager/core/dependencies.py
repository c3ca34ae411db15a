"""
Dependency injection for the application
"""

from fastapi import Request, Depends

from .database import DatabaseManager
from ..domains.patient.repositories.patient_repository import PatientRepository
from ..domains.patient.services.patient_service import PatientService


# Database dependencies
async def get_database_manager(request: Request) -> DatabaseManager:
    """Get the pool owner created at startup"""
    return request.app.state.db_manager


# Repository dependencies
async def get_patient_repository(
    db_manager: DatabaseManager = Depends(get_database_manager)
) -> PatientRepository:
    """Get patient repository instance"""
    return PatientRepository(db_manager)


# Service dependencies
async def get_patient_service(
    repository: PatientRepository = Depends(get_patient_repository)
) -> PatientService:
    """Get patient service instance"""
    return PatientService(repository)
