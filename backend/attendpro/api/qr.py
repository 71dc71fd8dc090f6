# backend/attendpro/api/qr.py
"""QR Code API endpoints."""
from datetime import datetime, timedelta
from flask import Blueprint, current_app
from flask_jwt_extended import jwt_required
from attendpro import limiter
from attendpro.services.qr_service import QRService
from attendpro.utils.decorators import admin_required
from attendpro.utils.helpers import success_response

qr_bp = Blueprint('qr', __name__)


@qr_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='QR service is running')


@qr_bp.route('/current', methods=['GET'])
@jwt_required()
@admin_required
@limiter.limit("120 per hour")
def current_qr():
    """Issue a fresh QR code for the check-in kiosk display."""
    clock = current_app.config.get('ATTENDANCE_CLOCK') or datetime.now
    issued_at = clock().replace(microsecond=0)
    validity = timedelta(minutes=current_app.config['QR_VALIDITY_MINUTES'])

    qr_string, qr_image = QRService.generate_qr_code(
        issued_at=issued_at,
        location_name=current_app.config['SITE_NAME']
    )

    return success_response(
        data={
            'qr_data': qr_string,
            'qr_image': qr_image,
            'issued_at': issued_at.isoformat(),
            'expires_at': (issued_at + validity).isoformat(),
            'refresh_in': current_app.config['QR_REGENERATION_SECONDS']
        },
        message="QR code generated successfully"
    )
