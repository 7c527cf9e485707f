# ghmirror/models/project.py
from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from ghmirror.core.db import Base


class Project(Base):
    __tablename__ = "project"
    __table_args__ = (
        # one row per (owner, name)
        UniqueConstraint("owner", "name", name="project_owner_name_unique"),
    )

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String(255), nullable=True)
    owner = Column(Integer, ForeignKey("user.id"), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    language = Column(String(255), nullable=True)
    created_at = Column(Integer, nullable=True)   # epoch seconds
