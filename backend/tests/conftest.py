"""Shared fixtures for the AttendPro test suite."""
import math
from datetime import datetime

import pytest
from flask_jwt_extended import create_access_token

from attendpro import create_app, db
from attendpro.models.user import User, UserRole

TARGET_LAT = -1.2921
TARGET_LON = 36.8219
EARTH_RADIUS = 6371000


class FixedClock:
    """Clock whose time tests can move."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def north_of(lat: float, lon: float, meters: float):
    """Point `meters` due north along the meridian."""
    return lat + math.degrees(meters / EARTH_RADIUS), lon


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 8, 30, 0))


@pytest.fixture
def app(clock):
    """Create test app."""
    app = create_app('testing')
    app.config['ATTENDANCE_CLOCK'] = clock
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def make_user(username: str, role: UserRole = UserRole.EMPLOYEE, is_active: bool = True) -> User:
    user = User(
        username=username,
        email=f'{username}@example.com',
        full_name=username.title(),
        department='Operations',
        role=role,
        is_active=is_active
    )
    user.set_password('password123')
    return user.save()


def bearer(user: User) -> dict:
    token = create_access_token(identity=str(user.id))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def user(app):
    return make_user('jdoe')


@pytest.fixture
def auth_headers(user):
    return bearer(user)


@pytest.fixture
def admin_headers(app):
    return bearer(make_user('boss', role=UserRole.ADMIN))
