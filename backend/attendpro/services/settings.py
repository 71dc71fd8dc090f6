# backend/attendpro/services/settings.py
"""Attendance rule configuration."""
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class GeofenceTarget:
    """Circular zone a check-in must fall inside."""
    latitude: float
    longitude: float
    radius_meters: float = 100.0


@dataclass(frozen=True)
class AttendanceSettings:
    """Per-deployment thresholds for the check-in rules."""
    geofence: GeofenceTarget
    qr_validity: timedelta = timedelta(minutes=5)
    work_start_time: time = time(8, 0, 0)
    late_threshold: time = time(9, 15, 0)

    def __post_init__(self):
        if self.geofence.radius_meters < 0:
            raise ValueError("Geofence radius must not be negative")
        if self.qr_validity < timedelta(0):
            raise ValueError("QR validity window must not be negative")
        if self.late_threshold < self.work_start_time:
            raise ValueError("Late threshold must not precede work start time")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'AttendanceSettings':
        """Build settings from a Flask config mapping."""
        return cls(
            geofence=GeofenceTarget(
                latitude=float(config['GEOFENCE_LATITUDE']),
                longitude=float(config['GEOFENCE_LONGITUDE']),
                radius_meters=float(config['GEOFENCE_RADIUS_METERS'])
            ),
            qr_validity=timedelta(minutes=float(config['QR_VALIDITY_MINUTES'])),
            work_start_time=parse_time(config['WORK_START_TIME']),
            late_threshold=parse_time(config['LATE_THRESHOLD'])
        )


def parse_time(value: Union[str, time]) -> time:
    """Parse an HH:MM or HH:MM:SS string."""
    if isinstance(value, time):
        return value

    for fmt in ('%H:%M:%S', '%H:%M'):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue

    raise ValueError(f"Invalid time of day: {value!r}")
