"""Tests for the check-in rules and the mark-attendance workflow."""
from datetime import datetime, time, timedelta

import pytest

from attendpro.models.attendance import AttendanceRecord, AttendanceStatus
from attendpro.services.attendance_service import (
    AttendanceService, CheckInRequest, RejectionKind,
    check_coordinates, check_geofence, check_not_duplicate, check_qr_freshness, classify_status
)
from attendpro.services.attendance_store import AttendanceStore, StorageConflict, StorageUnavailable
from attendpro.services.settings import AttendanceSettings, GeofenceTarget, parse_time
from conftest import TARGET_LAT, TARGET_LON, north_of

SETTINGS = AttendanceSettings(geofence=GeofenceTarget(TARGET_LAT, TARGET_LON, 100))
WORK_START = time(8, 0, 0)
LATE_AFTER = time(9, 15, 0)


def at(hour, minute, second=0, microsecond=0):
    return datetime(2026, 3, 2, hour, minute, second, microsecond)


def fresh_request(user_id, now, lat=TARGET_LAT, lon=TARGET_LON, **kwargs):
    return CheckInRequest(user_id=user_id, qr_data=now.isoformat(), latitude=lat, longitude=lon, **kwargs)


# ---------------------------------------------------------------- rules

@pytest.mark.parametrize('moment, expected', [
    (at(7, 59, 59), AttendanceStatus.EARLY),
    (at(8, 0, 0), AttendanceStatus.PRESENT),
    (at(8, 30, 0), AttendanceStatus.PRESENT),
    (at(9, 15, 0), AttendanceStatus.PRESENT),
    (at(9, 15, 0, 999999), AttendanceStatus.PRESENT),
    (at(9, 15, 1), AttendanceStatus.LATE),
    (at(0, 0, 0), AttendanceStatus.EARLY),
    (at(23, 59, 59), AttendanceStatus.LATE),
])
def test_classify_status_boundaries(moment, expected):
    assert classify_status(moment, WORK_START, LATE_AFTER) is expected


def test_classify_status_uses_configured_thresholds():
    assert classify_status(at(8, 30), time(9, 0), time(9, 30)) is AttendanceStatus.EARLY
    assert classify_status(at(8, 30), time(7, 0), time(8, 0)) is AttendanceStatus.LATE


def test_check_coordinates_rejects_out_of_range():
    rejection = check_coordinates(-91, 0)
    assert rejection.kind is RejectionKind.INVALID_COORDINATES
    assert check_coordinates(TARGET_LAT, TARGET_LON) is None


def test_check_qr_freshness_window_is_inclusive():
    now = at(8, 30)
    issued_at, rejection = check_qr_freshness((now - timedelta(minutes=5)).isoformat(), now, timedelta(minutes=5))
    assert rejection is None
    assert issued_at == now - timedelta(minutes=5)


def test_check_qr_freshness_expired_one_second_after_window():
    now = at(8, 30)
    stale = (now - timedelta(minutes=5, seconds=1)).isoformat()
    issued_at, rejection = check_qr_freshness(stale, now, timedelta(minutes=5))
    assert issued_at is None
    assert rejection.kind is RejectionKind.EXPIRED_TOKEN


def test_check_qr_freshness_rejects_future_token():
    now = at(8, 30)
    _, rejection = check_qr_freshness((now + timedelta(seconds=30)).isoformat(), now, timedelta(minutes=5))
    assert rejection.kind is RejectionKind.EXPIRED_TOKEN
    assert 'not yet valid' in rejection.detail


def test_check_qr_freshness_malformed():
    _, rejection = check_qr_freshness('OFFICE_CHECKIN_SYSTEM', at(8, 30), timedelta(minutes=5))
    assert rejection.kind is RejectionKind.MALFORMED_TOKEN


def test_check_geofence_inside_and_outside():
    distance, rejection = check_geofence(TARGET_LAT, TARGET_LON, SETTINGS.geofence)
    assert distance == 0
    assert rejection is None

    lat, lon = north_of(TARGET_LAT, TARGET_LON, 150)
    distance, rejection = check_geofence(lat, lon, SETTINGS.geofence)
    assert rejection.kind is RejectionKind.OUT_OF_RANGE
    assert rejection.distance == distance
    assert distance == pytest.approx(150, abs=0.5)


def test_check_not_duplicate_uses_store(app, user):
    store = AttendanceStore()
    assert check_not_duplicate(store, user.id, at(8, 0).date()) is None

    store.insert(AttendanceRecord(
        user_id=user.id, timestamp=at(8, 0), attendance_date=at(8, 0).date(),
        status=AttendanceStatus.PRESENT, latitude=TARGET_LAT, longitude=TARGET_LON, qr_data='x'
    ))
    rejection = check_not_duplicate(store, user.id, at(8, 0).date())
    assert rejection.kind is RejectionKind.ALREADY_MARKED


# ---------------------------------------------------------------- settings

def test_settings_from_config(app):
    settings = AttendanceSettings.from_config(app.config)
    assert settings.geofence == GeofenceTarget(-1.2921, 36.8219, 100.0)
    assert settings.qr_validity == timedelta(minutes=5)
    assert settings.work_start_time == time(8, 0)
    assert settings.late_threshold == time(9, 15)


def test_settings_reject_inverted_thresholds():
    with pytest.raises(ValueError):
        AttendanceSettings(geofence=SETTINGS.geofence, work_start_time=time(10, 0), late_threshold=time(9, 0))


@pytest.mark.parametrize('text, expected', [
    ('08:00:00', time(8, 0)),
    ('09:15', time(9, 15)),
    (' 17:30:05 ', time(17, 30, 5)),
])
def test_parse_time(text, expected):
    assert parse_time(text) == expected


def test_parse_time_invalid():
    with pytest.raises(ValueError):
        parse_time('quarter past nine')


# ---------------------------------------------------------------- workflow

def test_mark_attendance_at_target_is_present(app, user, clock):
    service = AttendanceService(SETTINGS, clock=clock)

    result, rejection = service.mark_attendance(fresh_request(user.id, clock.now, accuracy=12.5))

    assert rejection is None
    assert result.status is AttendanceStatus.PRESENT
    assert result.distance == 0
    assert result.record.id is not None
    assert result.record.timestamp == clock.now
    assert result.record.attendance_date == clock.now.date()
    assert result.record.accuracy == 12.5
    assert AttendanceRecord.query.count() == 1


def test_mark_attendance_early_and_late(app, clock):
    from conftest import make_user

    service = AttendanceService(SETTINGS, clock=clock)

    clock.now = at(7, 45)
    early, _ = service.mark_attendance(fresh_request(make_user('early').id, clock.now))
    clock.now = at(9, 40)
    late, _ = service.mark_attendance(fresh_request(make_user('late').id, clock.now))

    assert early.status is AttendanceStatus.EARLY
    assert late.status is AttendanceStatus.LATE


def test_mark_attendance_out_of_range_writes_nothing(app, user, clock):
    service = AttendanceService(SETTINGS, clock=clock)
    lat, lon = north_of(TARGET_LAT, TARGET_LON, 150)

    result, rejection = service.mark_attendance(fresh_request(user.id, clock.now, lat=lat, lon=lon))

    assert result is None
    assert rejection.kind is RejectionKind.OUT_OF_RANGE
    assert rejection.distance == pytest.approx(150, abs=0.5)
    assert AttendanceRecord.query.count() == 0


def test_second_check_in_same_day_is_already_marked(app, user, clock):
    service = AttendanceService(SETTINGS, clock=clock)
    service.mark_attendance(fresh_request(user.id, clock.now))

    clock.now = at(10, 0)
    lat, lon = north_of(TARGET_LAT, TARGET_LON, 5000)
    result, rejection = service.mark_attendance(fresh_request(user.id, clock.now, lat=lat, lon=lon))

    assert result is None
    assert rejection.kind is RejectionKind.ALREADY_MARKED
    assert AttendanceRecord.query.count() == 1
    assert AttendanceRecord.query.first().status is AttendanceStatus.PRESENT


def test_check_in_next_day_is_allowed(app, user, clock):
    service = AttendanceService(SETTINGS, clock=clock)
    service.mark_attendance(fresh_request(user.id, clock.now))

    clock.now = clock.now + timedelta(days=1)
    result, rejection = service.mark_attendance(fresh_request(user.id, clock.now))

    assert rejection is None
    assert AttendanceRecord.query.count() == 2


def test_coordinates_checked_before_token(app, user, clock):
    service = AttendanceService(SETTINGS, clock=clock)
    request = CheckInRequest(user_id=user.id, qr_data='garbage', latitude=95, longitude=0)

    _, rejection = service.mark_attendance(request)

    assert rejection.kind is RejectionKind.INVALID_COORDINATES


def test_token_checked_before_duplicate(app, user, clock):
    service = AttendanceService(SETTINGS, clock=clock)
    service.mark_attendance(fresh_request(user.id, clock.now))

    stale = CheckInRequest(
        user_id=user.id,
        qr_data=(clock.now - timedelta(hours=1)).isoformat(),
        latitude=TARGET_LAT,
        longitude=TARGET_LON
    )
    _, rejection = service.mark_attendance(stale)

    assert rejection.kind is RejectionKind.EXPIRED_TOKEN


def test_lost_insert_race_maps_to_already_marked(app, user, clock):
    """Both requests pass the pre-check; the unique constraint stops the second."""

    class RacingStore(AttendanceStore):
        def find_by_user_and_date(self, user_id, day):
            return None

    first = AttendanceService(SETTINGS, store=RacingStore(), clock=clock)
    second = AttendanceService(SETTINGS, store=RacingStore(), clock=clock)

    result, rejection = first.mark_attendance(fresh_request(user.id, clock.now))
    assert rejection is None

    result, rejection = second.mark_attendance(fresh_request(user.id, clock.now))
    assert result is None
    assert rejection.kind is RejectionKind.ALREADY_MARKED
    assert AttendanceRecord.query.filter_by(user_id=user.id).count() == 1


def test_store_insert_conflict(app, user):
    store = AttendanceStore()

    def record():
        return AttendanceRecord(
            user_id=user.id, timestamp=at(8, 5), attendance_date=at(8, 5).date(),
            status=AttendanceStatus.PRESENT, latitude=TARGET_LAT, longitude=TARGET_LON, qr_data='x'
        )

    store.insert(record())
    with pytest.raises(StorageConflict):
        store.insert(record())


def test_storage_unavailable_propagates(app, user, clock):
    class BrokenStore(AttendanceStore):
        def find_by_user_and_date(self, user_id, day):
            raise StorageUnavailable("database is down")

    service = AttendanceService(SETTINGS, store=BrokenStore(), clock=clock)

    with pytest.raises(StorageUnavailable):
        service.mark_attendance(fresh_request(user.id, clock.now))


def test_get_today_record(app, user, clock):
    service = AttendanceService(SETTINGS, clock=clock)
    assert service.get_today_record(user.id) is None

    service.mark_attendance(fresh_request(user.id, clock.now))

    assert service.get_today_record(user.id).status is AttendanceStatus.PRESENT
