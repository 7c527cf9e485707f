# ghmirror/models/commit.py
from sqlalchemy import Column, ForeignKey, Integer, String, Text
from ghmirror.core.db import Base


class Commit(Base):
    __tablename__ = "commit"

    sha = Column(String(40), primary_key=True)
    message = Column(Text, nullable=True)

    login_id = Column(Integer, ForeignKey("user.id"), index=True, nullable=False)   # user the commit was mirrored for
    author_id = Column(Integer, ForeignKey("user.id"), nullable=True)               # NULL when author can't be resolved
    committer_id = Column(Integer, ForeignKey("user.id"), nullable=True)
