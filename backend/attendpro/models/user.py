"""User model consumed by the attendance workflow."""
from enum import Enum
from werkzeug.security import generate_password_hash
from attendpro import db
from attendpro.models.base import BaseModel


class UserRole(Enum):
    """User roles enumeration."""
    EMPLOYEE = 'employee'
    ADMIN = 'admin'


class User(BaseModel):
    """Account that can mark attendance."""

    __tablename__ = 'users'

    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255), nullable=False)
    department = db.Column(db.String(100), nullable=True)

    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.EMPLOYEE)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    attendance_records = db.relationship('AttendanceRecord', backref='user', lazy='dynamic')

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f'<User {self.username}>'
