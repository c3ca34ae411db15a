"""
Patient domain models
"""

from typing import Optional, Dict, Any
from datetime import date, datetime
from enum import Enum
from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Table,
    func,
)

from ....core.database import metadata


class PatientStatus(str, Enum):
    """Lifecycle stage of a patient"""
    INQUIRY = "Inquiry"
    ONBOARDING = "Onboarding"
    ACTIVE = "Active"
    CHURNED = "Churned"


PATIENT_STATUSES = tuple(status.value for status in PatientStatus)

# Status filter value that disables filtering
ALL_STATUSES = "All"


patients_table = Table(
    "patients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(100), nullable=False),
    Column("middle_name", String(100), nullable=True),
    Column("last_name", String(100), nullable=False),
    Column("date_of_birth", Date, nullable=False),
    Column("status", String(20), nullable=False),
    Column("street_address", String(255), nullable=False),
    Column("city", String(100), nullable=False),
    Column("state", String(100), nullable=False),
    Column("zip_code", String(5), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "status IN ({})".format(", ".join(f"'{s}'" for s in PATIENT_STATUSES)),
        name="patients_status_check",
    ),
    Index("ix_patients_name", "last_name", "first_name"),
    Index("ix_patients_status", "status"),
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddressPayload(_CamelModel):
    """Address as submitted by a client; checked by the validation rules"""
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class PatientPayload(_CamelModel):
    """Create/update request body"""
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    dob: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("dob", "dateOfBirth"),
        description="Date of birth (YYYY-MM-DD)"
    )
    status: Optional[str] = None
    address: Optional[AddressPayload] = None

    def to_record(self) -> Dict[str, Any]:
        """camelCase dict consumed by the validation rules and the repository"""
        record = self.model_dump(by_alias=True)
        if record["address"] is None:
            record["address"] = {}
        return record


class Address(_CamelModel):
    """Nested address reassembled from the flat storage columns"""
    street: str
    city: str
    state: str
    zip: str


class PatientResponse(_CamelModel):
    """Patient as returned by every endpoint"""
    id: int
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    dob: date
    status: str
    address: Address
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class PatientEntity:
    """Internal patient entity for repository"""
    id: int
    first_name: str
    middle_name: Optional[str]
    last_name: str
    date_of_birth: date
    status: str
    street_address: str
    city: str
    state: str
    zip_code: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_response(self) -> PatientResponse:
        return PatientResponse(
            id=self.id,
            first_name=self.first_name,
            middle_name=self.middle_name,
            last_name=self.last_name,
            dob=self.date_of_birth,
            status=self.status,
            address=Address(
                street=self.street_address,
                city=self.city,
                state=self.state,
                zip=self.zip_code
            ),
            created_at=self.created_at,
            updated_at=self.updated_at
        )
