"""
HR system synchronisation.

Pulls the employee export, maps it onto users by employee_id and records the
run in sync_logs. A failed fetch is logged and re-raised; nothing is written
to users in that case.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from .db_models import DBSyncLog, DBUser
from .exceptions import ConfigurationError, HRSystemError
from .external_clients import HRSystemClient

logger = logging.getLogger(__name__)

# HR field -> users column
FIELD_MAP = {
    "employeeId": "employee_id",
    "name": "name",
    "department": "department",
    "position": "position",
    "email": "email",
    "hireDate": "hire_date",
}

SYNCED_COLUMNS = ("name", "department", "position", "email", "hire_date")
PROFILE_KEYS = ("phone", "address", "biography")


def format_employee(record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Map one HR record to snake_case user fields; None when the record lacks an id or email."""
    formatted = {column: record.get(field) for field, column in FIELD_MAP.items()}
    if not formatted["employee_id"] or not formatted["email"]:
        return None
    profile = record.get("profile") or {}
    formatted["profile"] = {key: profile[key] for key in PROFILE_KEYS if key in profile}
    return formatted


def _differs(user: DBUser, employee: Dict[str, Any]) -> bool:
    for column in SYNCED_COLUMNS:
        if getattr(user, column) != employee[column]:
            return True
    profile_data = user.profile_data or {}
    return any(profile_data.get(key) != value for key, value in employee["profile"].items())


def _apply(user: DBUser, employee: Dict[str, Any]) -> None:
    user.employee_id = employee["employee_id"]
    for column in SYNCED_COLUMNS:
        setattr(user, column, employee[column])
    # Reassign so the JSON column is flagged dirty
    user.profile_data = {**(user.profile_data or {}), **employee["profile"]}


class HRSyncService:
    def __init__(self, db: Session, hr_client: HRSystemClient):
        self.db = db
        self.hr_client = hr_client

    def _record(self, status: str, details: Dict[str, Any]) -> None:
        self.db.add(DBSyncLog(operation="sync", status=status, details=json.dumps(details)))
        self.db.commit()

    def _diff(self, employees: List[Dict[str, Any]]) -> Tuple[List[Dict], List[Tuple[DBUser, Dict]], int]:
        ids = [e["employee_id"] for e in employees]
        emails = [e["email"].lower() for e in employees]
        by_employee_id = {
            u.employee_id: u for u in self.db.query(DBUser).filter(DBUser.employee_id.in_(ids)).all()
        }
        by_email = {
            u.email.lower(): u for u in
            self.db.query(DBUser).filter(func.lower(DBUser.email).in_(emails)).all()
        }

        to_insert, to_update = [], []
        claimed = set()
        skipped = 0
        for employee in employees:
            email = employee["email"].lower()
            existing = by_employee_id.get(employee["employee_id"])
            owner = by_email.get(email)
            # Self-registered accounts are linked by email on their first sync
            if existing is None and owner is not None and owner.employee_id is None and email not in claimed:
                existing = owner
            if email in claimed or (owner is not None and owner is not existing):
                logger.warning(
                    f"HR sync skipped employee {employee['employee_id']}: "
                    f"email {employee['email']} belongs to another user"
                )
                skipped += 1
                continue
            claimed.add(email)

            if existing is None:
                to_insert.append(employee)
            elif existing.employee_id is None or _differs(existing, employee):
                to_update.append((existing, employee))
        return to_insert, to_update, skipped

    async def sync(self) -> Dict[str, int]:
        """
        Synchronise users with the HR system.

        Returns:
            Dictionary with inserted, updated and skipped counts

        Raises:
            HRSystemError: If the HR API cannot be read
            ConfigurationError: If the HR API is not configured
        """
        try:
            records = await self.hr_client.fetch_employees()
        except (HRSystemError, ConfigurationError) as e:
            logger.error(f"HR sync failed: {e}")
            self._record("error", {"error": str(e)})
            raise

        employees = []
        skipped = 0
        for record in records:
            formatted = format_employee(record) if isinstance(record, dict) else None
            if formatted is None:
                skipped += 1
                continue
            employees.append(formatted)

        if skipped:
            logger.warning(f"HR sync skipped {skipped} records without employeeId or email")

        # Later records win when the export repeats an employee id
        unique = {}
        for employee in employees:
            unique[employee["employee_id"]] = employee
        duplicates = len(employees) - len(unique)
        if duplicates:
            logger.warning(f"HR sync ignored {duplicates} duplicate employeeId records")
            skipped += duplicates
        employees = list(unique.values())

        try:
            to_insert, to_update, conflicts = self._diff(employees)
            skipped += conflicts

            for employee in to_insert:
                user = DBUser(role="member", profile_data={})
                _apply(user, employee)
                self.db.add(user)

            for user, employee in to_update:
                _apply(user, employee)

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"HR sync database update failed: {e}")
            self._record("error", {"error": str(e)})
            raise

        results = {"inserted": len(to_insert), "updated": len(to_update), "skipped": skipped}
        self._record("success", results)
        logger.info(f"HR sync completed: {results}")
        return results
