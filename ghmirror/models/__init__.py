from ghmirror.models.user import User
from ghmirror.models.user_email import UserEmail
from ghmirror.models.project import Project
from ghmirror.models.commit import Commit

__all__ = ["User", "UserEmail", "Project", "Commit"]
