# backend/attendpro/services/attendance_service.py
"""Check-in validation and classification.

Flow for a single check-in:
1. Coordinates are within degree ranges
2. QR payload is parseable and fresh
3. No record exists yet for the user today
4. Position is inside the geofence
5. Status is derived from the time of day
6. Record is inserted (unique per user and day)

Each rule returns a rejection instead of raising, and the first rejection
ends the request with nothing written.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable, Optional, Tuple

from attendpro.models.attendance import AttendanceRecord, AttendanceStatus
from attendpro.services.attendance_store import AttendanceStore, StorageConflict
from attendpro.services.gps_service import GPSService
from attendpro.services.qr_service import QRService
from attendpro.services.settings import AttendanceSettings, GeofenceTarget

logger = logging.getLogger(__name__)


class RejectionKind(Enum):
    """Reasons a check-in can be refused."""
    INVALID_COORDINATES = "InvalidCoordinates"
    MALFORMED_TOKEN = "MalformedToken"
    EXPIRED_TOKEN = "ExpiredToken"
    ALREADY_MARKED = "AlreadyMarked"
    OUT_OF_RANGE = "OutOfRange"


@dataclass(frozen=True)
class CheckInRequest:
    """A check-in as submitted by an authenticated user."""
    user_id: int
    qr_data: str
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class CheckInRejection:
    kind: RejectionKind
    detail: str
    distance: Optional[float] = None


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceRecord
    status: AttendanceStatus
    distance: float


def check_coordinates(latitude: float, longitude: float) -> Optional[CheckInRejection]:
    if not GPSService.validate_coordinates(latitude, longitude):
        return CheckInRejection(RejectionKind.INVALID_COORDINATES, "Invalid coordinates")
    return None


def check_qr_freshness(
    qr_data: str,
    now: datetime,
    validity: timedelta
) -> Tuple[Optional[datetime], Optional[CheckInRejection]]:
    """Return the payload's issuance time if it is still inside the window."""
    issued_at = QRService.extract_issued_at(qr_data)
    if issued_at is None:
        return None, CheckInRejection(RejectionKind.MALFORMED_TOKEN, "QR code could not be read")

    is_fresh, error_msg = QRService.check_freshness(issued_at, now, validity)
    if not is_fresh:
        return None, CheckInRejection(RejectionKind.EXPIRED_TOKEN, error_msg)

    return issued_at, None


def check_not_duplicate(store: AttendanceStore, user_id: int, day: date) -> Optional[CheckInRejection]:
    if store.find_by_user_and_date(user_id, day) is not None:
        return CheckInRejection(RejectionKind.ALREADY_MARKED, "Attendance already marked for today")
    return None


def check_geofence(
    latitude: float,
    longitude: float,
    target: GeofenceTarget
) -> Tuple[float, Optional[CheckInRejection]]:
    """Return the distance to the target, rejecting positions outside its radius."""
    location = GPSService.verify_location(latitude, longitude, target)
    distance = location['distance']

    if not location['is_inside']:
        return distance, CheckInRejection(
            RejectionKind.OUT_OF_RANGE,
            "You are too far from the allowed location",
            distance=distance
        )

    return distance, None


def classify_status(moment: datetime, work_start_time: time, late_threshold: time) -> AttendanceStatus:
    """Early before work start, Present up to and including the late threshold, Late after."""
    time_of_day = moment.time().replace(microsecond=0)

    if time_of_day < work_start_time:
        return AttendanceStatus.EARLY
    if time_of_day <= late_threshold:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.LATE


class AttendanceService:
    """Runs the check-in rules and records accepted check-ins."""

    def __init__(
        self,
        settings: AttendanceSettings,
        store: Optional[AttendanceStore] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.settings = settings
        self.store = store or AttendanceStore()
        self.clock = clock or datetime.now

    def mark_attendance(
        self,
        request: CheckInRequest
    ) -> Tuple[Optional[CheckInResult], Optional[CheckInRejection]]:
        """
        Validate a check-in and persist it when every rule passes.
        Returns: (result, rejection), exactly one of which is set.

        StorageUnavailable from the store propagates to the caller.
        """
        now = self.clock()

        rejection = check_coordinates(request.latitude, request.longitude)
        if rejection:
            return None, rejection

        _, rejection = check_qr_freshness(request.qr_data, now, self.settings.qr_validity)
        if rejection:
            return None, rejection

        rejection = check_not_duplicate(self.store, request.user_id, now.date())
        if rejection:
            return None, rejection

        distance, rejection = check_geofence(request.latitude, request.longitude, self.settings.geofence)
        if rejection:
            return None, rejection

        status = classify_status(now, self.settings.work_start_time, self.settings.late_threshold)

        record = AttendanceRecord(
            user_id=request.user_id,
            timestamp=now,
            attendance_date=now.date(),
            status=status,
            latitude=request.latitude,
            longitude=request.longitude,
            accuracy=request.accuracy,
            qr_data=request.qr_data.strip()
        )

        try:
            self.store.insert(record)
        except StorageConflict:
            logger.info("Concurrent check-in for user %s on %s lost the insert race",
                        request.user_id, now.date())
            return None, CheckInRejection(RejectionKind.ALREADY_MARKED, "Attendance already marked for today")

        return CheckInResult(record=record, status=status, distance=distance), None

    def get_today_record(self, user_id: int) -> Optional[AttendanceRecord]:
        return self.store.find_by_user_and_date(user_id, self.clock().date())
