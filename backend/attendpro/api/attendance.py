# File: backend/attendpro/api/attendance.py
"""Attendance API endpoints."""
from flask import Blueprint, request, current_app, g
from flask_jwt_extended import jwt_required
from attendpro import limiter
from attendpro.models.attendance import AttendanceStatus
from attendpro.services.attendance_service import (
    AttendanceService, CheckInRequest, RejectionKind
)
from attendpro.services.attendance_store import AttendanceStore, StorageError
from attendpro.services.settings import AttendanceSettings
from attendpro.utils.decorators import active_user_required
from attendpro.utils.helpers import success_response, error_response
from attendpro.utils.validators import Validator, ValidationError

attendance_bp = Blueprint('attendance', __name__)

REJECTION_STATUS_CODES = {
    RejectionKind.INVALID_COORDINATES: 400,
    RejectionKind.MALFORMED_TOKEN: 400,
    RejectionKind.EXPIRED_TOKEN: 400,
    RejectionKind.OUT_OF_RANGE: 400,
    RejectionKind.ALREADY_MARKED: 409,
}


def build_attendance_service() -> AttendanceService:
    """Create a service bound to the current app's configuration."""
    return AttendanceService(
        AttendanceSettings.from_config(current_app.config),
        AttendanceStore(),
        clock=current_app.config.get('ATTENDANCE_CLOCK')
    )


def rejection_response(rejection):
    extra = {
        'error_kind': rejection.kind.value,
        'detail': rejection.detail
    }
    if rejection.distance is not None:
        extra['distance_meters'] = rejection.distance

    return error_response(rejection.detail, REJECTION_STATUS_CODES[rejection.kind], **extra)


def storage_failure_response():
    current_app.logger.exception("Attendance storage failure")
    return error_response("Internal server error", 500)


@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')


@attendance_bp.route('/mark', methods=['POST'])
@jwt_required()
@active_user_required
@limiter.limit("10 per minute")
def mark_attendance():
    """Validate a QR + GPS check-in and record today's attendance."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return error_response("Request body must be JSON", 400)

    validation = Validator.validate_required_fields(data, ['qr_data', 'latitude', 'longitude'])
    if not validation['is_valid']:
        return error_response("QR data and location coordinates are required", 400,
                              errors=validation['errors'])

    try:
        latitude = Validator.parse_float(data['latitude'], 'latitude')
        longitude = Validator.parse_float(data['longitude'], 'longitude')
    except ValidationError as e:
        return error_response(str(e), 400,
                              error_kind=RejectionKind.INVALID_COORDINATES.value, detail=str(e))

    try:
        accuracy = Validator.parse_optional_float(data.get('accuracy'), 'accuracy')
    except ValidationError as e:
        return error_response(str(e), 400)

    qr_data = data['qr_data']
    if isinstance(qr_data, (int, float)) and not isinstance(qr_data, bool):
        qr_data = str(qr_data)

    user = g.current_user
    service = build_attendance_service()

    try:
        result, rejection = service.mark_attendance(CheckInRequest(
            user_id=user.id,
            qr_data=qr_data,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy
        ))
    except StorageError:
        return storage_failure_response()

    if rejection:
        current_app.logger.info(
            "Check-in rejected for user %s: %s", user.id, rejection.kind.value
        )
        return rejection_response(rejection)

    current_app.logger.info(
        "Attendance marked as %s for user %s (%.2f m)", result.status.value, user.id, result.distance
    )

    return success_response(
        data={
            'status': result.status.value,
            'distance_meters': result.distance,
            'record': result.record.to_dict()
        },
        message=f"Attendance marked successfully as {result.status.value}",
        status_code=201
    )


@attendance_bp.route('/today', methods=['GET'])
@jwt_required()
@active_user_required
def today():
    """Today's attendance status for the current user."""
    service = build_attendance_service()

    try:
        record = service.get_today_record(g.current_user.id)
    except StorageError:
        return storage_failure_response()

    return success_response(data={
        'marked': record is not None,
        'status': record.status.value if record else None,
        'record': record.to_dict() if record else None
    })


@attendance_bp.route('/history', methods=['GET'])
@jwt_required()
@active_user_required
def history():
    """Paginated attendance history with per-status statistics."""
    args = request.args

    try:
        pagination = Validator.parse_pagination(
            args.get('page'), args.get('limit'),
            current_app.config['DEFAULT_PAGE_SIZE'], current_app.config['MAX_PAGE_SIZE']
        )
        start_date = Validator.parse_date(args.get('start_date'), 'start_date')
        end_date = Validator.parse_date(args.get('end_date'), 'end_date')
    except ValidationError as e:
        return error_response(str(e), 400)

    status = None
    if args.get('status'):
        try:
            status = AttendanceStatus(args['status'])
        except ValueError:
            return error_response("status must be one of Present, Late, Early", 400)

    store = AttendanceStore()
    user_id = g.current_user.id

    try:
        records, total = store.get_history(
            user_id,
            page=pagination['page'],
            limit=pagination['limit'],
            start_date=start_date,
            end_date=end_date,
            status=status
        )
        stats = store.get_stats(user_id)
    except StorageError:
        return storage_failure_response()

    limit = pagination['limit']
    return success_response(data={
        'records': [record.to_dict() for record in records],
        'pagination': {
            'page': pagination['page'],
            'limit': limit,
            'total': total,
            'pages': (total + limit - 1) // limit
        },
        'stats': stats
    })
