"""Tests for QR payload parsing, freshness and generation."""
import json
from datetime import datetime, timedelta, timezone

import pytest

from attendpro.services.qr_service import QRService

NOW = datetime(2026, 3, 2, 8, 30, 0)
WINDOW = timedelta(minutes=5)


def test_extract_naive_iso_timestamp():
    assert QRService.extract_issued_at('2026-03-02T08:27:00') == datetime(2026, 3, 2, 8, 27, 0)


def test_extract_space_separated_timestamp():
    assert QRService.extract_issued_at(' 2026-03-02 08:27:00 ') == datetime(2026, 3, 2, 8, 27, 0)


def test_extract_utc_timestamp_converts_to_local():
    utc_text = NOW.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')
    assert QRService.extract_issued_at(utc_text) == NOW


def test_extract_offset_timestamp_converts_to_local():
    assert QRService.extract_issued_at(NOW.astimezone(timezone.utc).isoformat()) == NOW


def test_extract_epoch_seconds():
    assert QRService.extract_issued_at(str(int(NOW.timestamp()))) == NOW


def test_extract_epoch_milliseconds():
    assert QRService.extract_issued_at(str(int(NOW.timestamp() * 1000))) == NOW


def test_extract_json_payload():
    payload = json.dumps({'type': 'attendance', 'timestamp': NOW.isoformat(), 'locationName': 'HQ'})
    assert QRService.extract_issued_at(payload) == NOW


def test_extract_json_payload_with_issued_at_epoch():
    payload = json.dumps({'issued_at': int(NOW.timestamp())})
    assert QRService.extract_issued_at(payload) == NOW


@pytest.mark.parametrize('payload', [
    '',
    '   ',
    'hello world',
    '2026-13-45T99:00:00',
    '{"type": "attendance"}',
    '{"timestamp": "soon"}',
    '{"timestamp": true}',
    '{not json',
    '[1, 2, 3]',
    'nan',
    '{"timestamp": "2026-03-02T08:27:00", "pad": "' + 'x' * 2000 + '"}',
    None,
    12345,
])
def test_extract_malformed_payloads(payload):
    assert QRService.extract_issued_at(payload) is None


def test_freshness_accepts_just_issued():
    assert QRService.check_freshness(NOW, NOW, WINDOW) == (True, None)


def test_freshness_accepts_exact_window():
    assert QRService.check_freshness(NOW - WINDOW, NOW, WINDOW) == (True, None)


def test_freshness_rejects_one_second_past_window():
    is_fresh, error = QRService.check_freshness(NOW - WINDOW - timedelta(seconds=1), NOW, WINDOW)
    assert is_fresh is False
    assert error == "QR code has expired"


def test_freshness_rejects_future_dated_token():
    is_fresh, error = QRService.check_freshness(NOW + timedelta(seconds=1), NOW, WINDOW)
    assert is_fresh is False
    assert error == "QR code is not yet valid"


def test_generate_qr_code_round_trips_issue_time():
    qr_string, qr_image = QRService.generate_qr_code(NOW.replace(microsecond=123), 'Head Office')

    data = json.loads(qr_string)
    assert data['type'] == 'attendance'
    assert data['locationName'] == 'Head Office'
    assert QRService.extract_issued_at(qr_string) == NOW
    assert qr_image.startswith('data:image/png;base64,')
