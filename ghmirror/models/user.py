# ghmirror/models/user.py
from sqlalchemy import Boolean, Column, Integer, String, Text
from ghmirror.core.db import Base

class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    email = Column(String(255), index=True, nullable=True)
    hireable = Column(Boolean, nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    created_at = Column(Integer, nullable=True)   # epoch seconds
