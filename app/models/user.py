"""
User accounts and their job applications.

Passwords are stored as bcrypt hashes; `is_admin` gates every mutating
company/job route.
"""

from sqlalchemy import Column, String, Text, Boolean, Integer, ForeignKey, CheckConstraint, false
from app.core.database import Base


class User(Base):
    __tablename__ = "users"

    username = Column(String(25), primary_key=True)
    password = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, CheckConstraint("email LIKE '_%@_%'"), unique=True, nullable=False)
    is_admin = Column(Boolean, default=False, server_default=false(), nullable=False)

    def __repr__(self):
        return f"<User(username='{self.username}', is_admin={self.is_admin})>"


class Application(Base):
    """A user's application to a job."""
    __tablename__ = "applications"

    username = Column(String(25), ForeignKey("users.username", ondelete="CASCADE"), primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
