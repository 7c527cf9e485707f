# ghmirror/models/user_email.py
from sqlalchemy import Column, ForeignKey, Integer, String
from ghmirror.core.db import Base


class UserEmail(Base):
    """Commit emails resolved to a user whose own row carries another (or no) email."""
    __tablename__ = "user_email"

    email = Column(String(255), primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id"), index=True, nullable=False)
