# backend/attendpro/utils/swagger.py
"""Swagger/OpenAPI configuration for the application."""
from flask_swagger_ui import get_swaggerui_blueprint

# Swagger UI configuration
SWAGGER_URL = '/api/docs'
API_URL = '/api/swagger.json'


def get_swagger_blueprint():
    """Create and return swagger UI blueprint."""
    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config={
            'app_name': "AttendPro API",
            'defaultModelsExpandDepth': -1,
            'docExpansion': 'list',
            'supportedSubmitMethods': ['get', 'post'],
            'validatorUrl': None,
        }
    )
    return swaggerui_blueprint


def _json(schema):
    return {"application/json": {"schema": schema}}


def _ref(name):
    return {"$ref": f"#/components/schemas/{name}"}


def generate_swagger_spec():
    """Generate OpenAPI/Swagger specification."""
    return {
        "openapi": "3.0.0",
        "info": {
            "title": "AttendPro API",
            "description": "Geofenced QR check-in with Present/Late/Early classification",
            "version": "1.0.0"
        },
        "servers": [
            {
                "url": "http://127.0.0.1:5000/api",
                "description": "Development server"
            }
        ],
        "components": {
            "securitySchemes": {
                "bearerAuth": {
                    "type": "http",
                    "scheme": "bearer",
                    "bearerFormat": "JWT"
                }
            },
            "schemas": {
                "AttendanceRecord": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer"},
                        "user_id": {"type": "integer"},
                        "timestamp": {"type": "string", "format": "date-time"},
                        "attendance_date": {"type": "string", "format": "date"},
                        "status": {"type": "string", "enum": ["Present", "Late", "Early"]},
                        "latitude": {"type": "number"},
                        "longitude": {"type": "number"},
                        "accuracy": {"type": "number", "nullable": True},
                        "qr_data": {"type": "string"}
                    }
                },
                "CheckIn": {
                    "type": "object",
                    "required": ["qr_data", "latitude", "longitude"],
                    "properties": {
                        "qr_data": {"type": "string", "description": "Scanned QR payload"},
                        "latitude": {"type": "number", "minimum": -90, "maximum": 90},
                        "longitude": {"type": "number", "minimum": -180, "maximum": 180},
                        "accuracy": {"type": "number", "description": "Reported GPS accuracy in meters"}
                    }
                },
                "Error": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean"},
                        "message": {"type": "string"},
                        "status_code": {"type": "integer"},
                        "error_kind": {
                            "type": "string",
                            "enum": ["MalformedToken", "ExpiredToken", "AlreadyMarked",
                                     "OutOfRange", "InvalidCoordinates"]
                        },
                        "detail": {"type": "string"},
                        "distance_meters": {"type": "number"}
                    }
                },
                "Success": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "boolean", "default": False},
                        "message": {"type": "string"},
                        "data": {"type": "object"}
                    }
                }
            }
        },
        "paths": {
            "/attendance/mark": {
                "post": {
                    "tags": ["Attendance"],
                    "summary": "Mark today's attendance",
                    "security": [{"bearerAuth": []}],
                    "requestBody": {"required": True, "content": _json(_ref("CheckIn"))},
                    "responses": {
                        "201": {
                            "description": "Attendance recorded",
                            "content": _json({
                                "type": "object",
                                "properties": {
                                    "error": {"type": "boolean"},
                                    "message": {"type": "string"},
                                    "data": {
                                        "type": "object",
                                        "properties": {
                                            "status": {"type": "string", "enum": ["Present", "Late", "Early"]},
                                            "distance_meters": {"type": "number"},
                                            "record": _ref("AttendanceRecord")
                                        }
                                    }
                                }
                            })
                        },
                        "400": {"description": "Check-in rejected", "content": _json(_ref("Error"))},
                        "401": {"description": "Authentication required", "content": _json(_ref("Error"))},
                        "409": {"description": "Attendance already marked", "content": _json(_ref("Error"))},
                        "500": {"description": "Internal server error", "content": _json(_ref("Error"))}
                    }
                }
            },
            "/attendance/today": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "Today's attendance status for the current user",
                    "security": [{"bearerAuth": []}],
                    "responses": {
                        "200": {"description": "Today's record or null", "content": _json(_ref("Success"))}
                    }
                }
            },
            "/attendance/history": {
                "get": {
                    "tags": ["Attendance"],
                    "summary": "Paginated attendance history with statistics",
                    "security": [{"bearerAuth": []}],
                    "parameters": [
                        {"name": "page", "in": "query", "schema": {"type": "integer", "minimum": 1}},
                        {"name": "limit", "in": "query", "schema": {"type": "integer", "minimum": 1}},
                        {"name": "start_date", "in": "query", "schema": {"type": "string", "format": "date"}},
                        {"name": "end_date", "in": "query", "schema": {"type": "string", "format": "date"}},
                        {"name": "status", "in": "query",
                         "schema": {"type": "string", "enum": ["Present", "Late", "Early"]}}
                    ],
                    "responses": {
                        "200": {"description": "History page", "content": _json(_ref("Success"))},
                        "400": {"description": "Invalid filter", "content": _json(_ref("Error"))}
                    }
                }
            },
            "/qr/current": {
                "get": {
                    "tags": ["QR Codes"],
                    "summary": "Fresh kiosk QR code (admin only)",
                    "security": [{"bearerAuth": []}],
                    "responses": {
                        "200": {"description": "QR payload and PNG image", "content": _json(_ref("Success"))},
                        "403": {"description": "Admin access required", "content": _json(_ref("Error"))}
                    }
                }
            }
        },
        "tags": [
            {"name": "Attendance", "description": "Check-in and attendance history"},
            {"name": "QR Codes", "description": "Kiosk QR code issuance"}
        ]
    }
