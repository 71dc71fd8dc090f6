"""Validation utilities for request payloads."""
import math
from datetime import date
from typing import Dict, List, Any, Optional


class ValidationError(Exception):
    """Raised when a request field cannot be used."""
    pass


class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []

        for field in required_fields:
            if field not in data or data[field] is None or data[field] == '':
                errors.append(f"{field} is required")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def parse_float(value: Any, field: str) -> float:
        """Convert a JSON number or numeric string to float."""
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a number")
        if math.isnan(number) or math.isinf(number):
            raise ValidationError(f"{field} must be a finite number")
        return number

    @staticmethod
    def parse_optional_float(value: Any, field: str) -> Optional[float]:
        if value is None or value == '':
            return None
        number = Validator.parse_float(value, field)
        if number < 0:
            raise ValidationError(f"{field} must not be negative")
        return number

    @staticmethod
    def parse_date(value: Optional[str], field: str) -> Optional[date]:
        """Parse an optional YYYY-MM-DD query parameter."""
        if not value:
            return None
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")

    @staticmethod
    def parse_pagination(page: Any, limit: Any, default_limit: int, max_limit: int) -> Dict[str, int]:
        """Clamp page/limit query parameters to sane values."""
        try:
            page = max(1, int(page)) if page else 1
            limit = max(1, int(limit)) if limit else default_limit
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be integers")

        return {
            "page": page,
            "limit": min(limit, max_limit)
        }
