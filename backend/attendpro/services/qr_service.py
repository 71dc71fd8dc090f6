# backend/attendpro/services/qr_service.py
"""QR Code generation and validation service.

Kiosk payloads only carry their issuance time. They are neither signed nor
bound to a specific kiosk, so anyone who can read a code can replay it until
it expires.
"""
import qrcode
import io
import base64
import json
from datetime import datetime, timedelta
from typing import Tuple, Optional

MAX_PAYLOAD_LENGTH = 1024
TIMESTAMP_KEYS = ('timestamp', 'issued_at')

# Epoch values above this are taken to be milliseconds (JavaScript Date.now())
EPOCH_MILLIS_THRESHOLD = 10 ** 11


class QRService:
    """Service for QR code operations."""

    @staticmethod
    def generate_qr_code(issued_at: datetime, location_name: str) -> Tuple[str, str]:
        """
        Generate a kiosk QR code.
        Returns: (qr_string, qr_image_base64)
        """
        qr_data = {
            'type': 'attendance',
            'timestamp': issued_at.replace(microsecond=0).isoformat(),
            'locationName': location_name
        }
        qr_string = json.dumps(qr_data, separators=(',', ':'))

        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(qr_string)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return qr_string, f"data:image/png;base64,{img_str}"

    @staticmethod
    def extract_issued_at(qr_data_string: str) -> Optional[datetime]:
        """
        Read the issuance time out of a scanned payload.

        Accepts a JSON object with a ``timestamp``/``issued_at`` key, an
        ISO-8601 string, or a UNIX epoch. Returns naive local time, or None
        when nothing parseable is found.
        """
        if not isinstance(qr_data_string, str):
            return None

        raw = qr_data_string.strip()
        if not raw or len(raw) > MAX_PAYLOAD_LENGTH:
            return None

        if raw.startswith('{'):
            try:
                qr_data = json.loads(raw)
            except json.JSONDecodeError:
                return None
            if not isinstance(qr_data, dict):
                return None
            for key in TIMESTAMP_KEYS:
                if key in qr_data:
                    return QRService._parse_timestamp(qr_data[key])
            return None

        return QRService._parse_timestamp(raw)

    @staticmethod
    def _parse_timestamp(value) -> Optional[datetime]:
        if isinstance(value, bool):
            return None

        if isinstance(value, (int, float)):
            return QRService._from_epoch(value)

        if not isinstance(value, str):
            return None

        value = value.strip()
        try:
            return QRService._from_epoch(float(value))
        except ValueError:
            pass

        if value.endswith(('Z', 'z')):
            value = value[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None

        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    @staticmethod
    def _from_epoch(value: float) -> Optional[datetime]:
        if value != value or value in (float('inf'), float('-inf')):
            return None
        if abs(value) > EPOCH_MILLIS_THRESHOLD:
            value = value / 1000
        try:
            return datetime.fromtimestamp(value)
        except (OverflowError, OSError, ValueError):
            return None

    @staticmethod
    def check_freshness(
        issued_at: datetime,
        now: datetime,
        validity: timedelta
    ) -> Tuple[bool, Optional[str]]:
        """
        Check a payload's age against the validity window.
        Returns: (is_fresh, error_message)
        """
        elapsed = now - issued_at

        if elapsed < timedelta(0):
            return False, "QR code is not yet valid"

        if elapsed > validity:
            return False, "QR code has expired"

        return True, None

