# backend/attendpro/models/attendance.py
"""Attendance record model."""
from datetime import date
from enum import Enum
from typing import Optional
from attendpro import db
from attendpro.models.base import BaseModel


class AttendanceStatus(Enum):
    """Check-in classification."""
    EARLY = 'Early'
    PRESENT = 'Present'
    LATE = 'Late'


class AttendanceRecord(BaseModel):
    """One accepted check-in. Written once, never updated."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'attendance_date', name='uq_attendance_user_date'),
    )

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    timestamp = db.Column(db.DateTime, nullable=False)
    attendance_date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False)

    # Where the check-in happened
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    accuracy = db.Column(db.Float, nullable=True)

    qr_data = db.Column(db.Text, nullable=False)

    @classmethod
    def find_by_user_and_date(cls, user_id: int, day: date) -> Optional['AttendanceRecord']:
        """Return the user's record for a calendar day, if any."""
        return cls.query.filter_by(user_id=user_id, attendance_date=day).first()

    def __repr__(self):
        return f'<AttendanceRecord {self.user_id}-{self.attendance_date}>'
