"""
Patient repository - handles data persistence
"""

from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
import logging

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.engine import Row

from ..models.patient import ALL_STATUSES, PatientEntity, patients_table
from ..validation import parse_date_of_birth
from ....core.database import BaseRepository, DatabaseManager


logger = logging.getLogger(__name__)


class PatientRepository(BaseRepository):
    """Repository for patient data persistence"""

    def __init__(self, db_manager: DatabaseManager):
        super().__init__(db_manager, patients_table)

    async def insert(self, record: Dict[str, Any]) -> PatientEntity:
        """Insert a validated record; the database assigns the id"""
        now = datetime.now(timezone.utc)
        statement = (
            insert(self.table)
            .values(**self._to_columns(record), created_at=now, updated_at=now)
            .returning(*self.table.c)
        )

        row = await self.execute_returning(statement)
        patient = self._row_to_entity(row)
        logger.info(f"Created patient {patient.id}")
        return patient

    async def find_all(
        self,
        search_term: Optional[str] = None,
        status_filter: Optional[str] = None
    ) -> List[PatientEntity]:
        """List patients, optionally narrowed by name substring and status"""
        statement = select(self.table)

        if search_term:
            statement = statement.where(or_(
                self.table.c.first_name.icontains(search_term, autoescape=True),
                self.table.c.last_name.icontains(search_term, autoescape=True)
            ))

        if status_filter and status_filter != ALL_STATUSES:
            statement = statement.where(self.table.c.status == status_filter)

        statement = statement.order_by(
            self.table.c.last_name.asc(),
            self.table.c.first_name.asc()
        )

        rows = await self.fetch_all(statement)
        return [self._row_to_entity(row) for row in rows]

    async def find_by_id(self, patient_id: int) -> Optional[PatientEntity]:
        """Find patient by id"""
        row = await self.fetch_one(
            select(self.table).where(self.table.c.id == patient_id)
        )
        return self._row_to_entity(row) if row else None

    async def update(self, patient_id: int, record: Dict[str, Any]) -> Optional[PatientEntity]:
        """Replace every mutable field; None when the id does not exist"""
        statement = (
            update(self.table)
            .where(self.table.c.id == patient_id)
            .values(**self._to_columns(record), updated_at=datetime.now(timezone.utc))
            .returning(*self.table.c)
        )

        row = await self.execute_returning(statement)
        if row is None:
            return None

        logger.info(f"Updated patient {patient_id}")
        return self._row_to_entity(row)

    async def remove(self, patient_id: int) -> Optional[PatientEntity]:
        """Hard delete; returns the removed record"""
        statement = (
            delete(self.table)
            .where(self.table.c.id == patient_id)
            .returning(*self.table.c)
        )

        row = await self.execute_returning(statement)
        if row is None:
            return None

        logger.info(f"Deleted patient {patient_id}")
        return self._row_to_entity(row)

    @staticmethod
    def _to_columns(record: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten a camelCase record into storage columns"""
        address = record.get("address") or {}
        middle_name = (record.get("middleName") or "").strip()

        return {
            "first_name": record["firstName"].strip(),
            "middle_name": middle_name or None,
            "last_name": record["lastName"].strip(),
            "date_of_birth": parse_date_of_birth(record["dob"]),
            "status": record["status"].strip(),
            "street_address": address["street"].strip(),
            "city": address["city"].strip(),
            "state": address["state"].strip(),
            "zip_code": address["zip"].strip(),
        }

    @staticmethod
    def _row_to_entity(row: Row) -> PatientEntity:
        """Convert a table row to entity"""
        doc = row._mapping
        return PatientEntity(
            id=doc["id"],
            first_name=doc["first_name"],
            middle_name=doc["middle_name"],
            last_name=doc["last_name"],
            date_of_birth=doc["date_of_birth"],
            status=doc["status"],
            street_address=doc["street_address"],
            city=doc["city"],
            state=doc["state"],
            zip_code=doc["zip_code"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"]
        )
