# backend/attendpro/services/attendance_store.py
"""Persistence for attendance records."""
from datetime import date
from typing import Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from attendpro import db
from attendpro.models.attendance import AttendanceRecord, AttendanceStatus


class StorageError(Exception):
    """Base class for attendance storage failures."""


class StorageConflict(StorageError):
    """A record already exists for this user and day."""


class StorageUnavailable(StorageError):
    """The database could not be reached or the statement failed."""


class AttendanceStore:
    """Reads and writes AttendanceRecord rows through the SQLAlchemy session."""

    def find_by_user_and_date(self, user_id: int, day: date) -> Optional[AttendanceRecord]:
        try:
            return AttendanceRecord.find_by_user_and_date(user_id, day)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable("Attendance lookup failed") from e

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Persist a new record; the (user, day) unique constraint decides races."""
        try:
            db.session.add(record)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise StorageConflict(
                f"Attendance already recorded for user {record.user_id} on {record.attendance_date}"
            ) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable("Attendance insert failed") from e

        return record

    def get_history(
        self,
        user_id: int,
        page: int = 1,
        limit: int = 20,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None
    ) -> Tuple[List[AttendanceRecord], int]:
        """Return one page of a user's records, newest first, and the total count."""
        query = AttendanceRecord.query.filter(AttendanceRecord.user_id == user_id)

        if start_date:
            query = query.filter(AttendanceRecord.attendance_date >= start_date)
        if end_date:
            query = query.filter(AttendanceRecord.attendance_date <= end_date)
        if status:
            query = query.filter(AttendanceRecord.status == status)

        try:
            total = query.count()
            records = (
                query.order_by(AttendanceRecord.timestamp.desc())
                .limit(limit)
                .offset((page - 1) * limit)
                .all()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable("Attendance history query failed") from e

        return records, total

    def get_stats(self, user_id: int) -> Dict:
        """Per-status counts over all of a user's records."""
        try:
            rows = (
                db.session.query(AttendanceRecord.status, func.count(AttendanceRecord.id))
                .filter(AttendanceRecord.user_id == user_id)
                .group_by(AttendanceRecord.status)
                .all()
            )
            first_record, last_record = (
                db.session.query(func.min(AttendanceRecord.timestamp), func.max(AttendanceRecord.timestamp))
                .filter(AttendanceRecord.user_id == user_id)
                .one()
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageUnavailable("Attendance statistics query failed") from e

        counts = {status: count for status, count in rows}

        return {
            'total_days': sum(counts.values()),
            'present_days': counts.get(AttendanceStatus.PRESENT, 0),
            'late_days': counts.get(AttendanceStatus.LATE, 0),
            'early_days': counts.get(AttendanceStatus.EARLY, 0),
            'first_record': first_record.isoformat() if first_record else None,
            'last_record': last_record.isoformat() if last_record else None
        }
