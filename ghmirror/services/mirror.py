# ghmirror/services/mirror.py
import enum
import logging
import re
from dataclasses import dataclass
from typing import Any

from ghmirror.core.extract import MISSING, parse_date, read_value, to_boolean
from ghmirror.github_client import GitHubClient
from ghmirror.models import Commit, Project, User, UserEmail
from ghmirror.services.entity_store import EntityStore

logger = logging.getLogger(__name__)

SHA_RE = re.compile(r"[a-f0-9]{40}")


class Outcome(str, enum.Enum):
    PRESENT = "present"        # already mirrored, nothing fetched
    CREATED = "created"        # fetched and inserted
    UNRESOLVED = "unresolved"  # remote couldn't tell us enough; no row
    REJECTED = "rejected"      # malformed input; nothing fetched


@dataclass(frozen=True)
class Resolution:
    outcome: Outcome
    id: Any = None

    @property
    def resolved(self) -> bool:
        return self.outcome in (Outcome.PRESENT, Outcome.CREATED)


def _value(data, path: str):
    """read_value, with the not-found sentinel folded into None for storage."""
    value = read_value(data, path)
    return None if value == MISSING else value


def _remote_error(data) -> str | None:
    if isinstance(data, dict) and "error" in data:
        return data["error"]
    return None


class MirrorEngine:
    """Read-through mirror of GitHub users, repos and commits.

    Every ``ensure_*`` call looks the entity up locally first and only goes
    to GitHub on a miss. Dependencies are resolved before the dependent row
    is written: users, then projects, then commits.
    """

    def __init__(self, store: EntityStore, github: GitHubClient):
        self.store = store
        self.github = github

    # --- users ---

    def ensure_user(self, user: str) -> Resolution:
        """Ensure that a user exists, or fetch it from GitHub."""
        if "@" in user:
            return self.ensure_user_by_email(user)
        return self.ensure_user_by_login(user)

    def ensure_user_by_login(self, login: str) -> Resolution:
        if not login:
            logger.error("Ignoring empty user login")
            return Resolution(Outcome.REJECTED)

        # GitHub logins are case-insensitive
        existing = self.store.find_ignore_case(User, login=login)
        if existing is not None:
            logger.debug("User %s exists", login)
            return Resolution(Outcome.PRESENT, existing.id)

        u = self.github.get_user(login)
        error = _remote_error(u)
        if error or not _value(u, "login"):
            logger.warning("Cannot find user %s on GitHub (%s)", login, error or "no login")
            return Resolution(Outcome.UNRESOLVED)

        # the login GitHub answers with may already be stored, e.g. after a rename
        user_id, created = self.store.insert_or_get(
            User,
            login=_value(u, "login"),
            name=_value(u, "name"),
            company=_value(u, "company"),
            email=_value(u, "email"),
            hireable=to_boolean(_value(u, "hireable")),
            bio=_value(u, "bio"),
            location=_value(u, "location"),
            created_at=parse_date(_value(u, "created_at")),
        )
        if not created:
            logger.debug("User %s is stored as %s", login, _value(u, "login"))
            return Resolution(Outcome.PRESENT, user_id)

        logger.info("New user %s", login)
        return Resolution(Outcome.CREATED, user_id)

    def ensure_user_by_email(self, email: str) -> Resolution:
        """Resolve a user known only by email.

        Looks in the local store first, then tries the v2 email search, which
        is best effort: when it has no login for the address the user stays
        unresolved and no row is written. An address that resolves to a user
        stored with another email is remembered in ``user_email``.
        """
        existing = self.store.find(User, email=email)
        if existing is not None:
            logger.debug("User with email %s exists", email)
            return Resolution(Outcome.PRESENT, existing.id)

        alias = self.store.find(UserEmail, email=email)
        if alias is not None:
            logger.debug("Email %s belongs to user %s", email, alias.user_id)
            return Resolution(Outcome.PRESENT, alias.user_id)

        u = self.github.get_user_by_email(email)
        login = _value(u, "user.login")
        if not login:
            logger.warning("Cannot find user %s", email)
            return Resolution(Outcome.UNRESOLVED)

        # the address may belong to a user we already mirrored by login
        by_login = self.store.find_ignore_case(User, login=login)
        if by_login is not None:
            logger.debug("User with email %s is %s", email, login)
            self._remember_email(email, by_login.id)
            return Resolution(Outcome.PRESENT, by_login.id)

        user_id, created = self.store.insert_or_get(
            User,
            login=login,
            name=_value(u, "user.name"),
            company=_value(u, "user.company"),
            email=email,
            hireable=None,
            bio=None,
            location=_value(u, "user.location"),
            created_at=parse_date(_value(u, "user.created_at")),
        )
        if not created:
            self._remember_email(email, user_id)
            return Resolution(Outcome.PRESENT, user_id)

        logger.info("New user %s (found through email %s)", login, email)
        return Resolution(Outcome.CREATED, user_id)

    def _remember_email(self, email: str, user_id: int) -> None:
        self.store.insert(UserEmail, email=email, user_id=user_id)

    # --- repos ---

    def ensure_repo(self, user: str, repo: str) -> Resolution:
        """Ensure that a repo exists, or fetch it from GitHub."""
        owner = self.ensure_user(user)
        if not owner.resolved:
            logger.warning("Cannot mirror repo %s/%s without its owner", user, repo)
            return Resolution(Outcome.UNRESOLVED)

        existing = self.store.find_ignore_case(Project, owner=owner.id, name=repo)
        if existing is not None:
            logger.debug("Repo %s/%s exists", user, repo)
            return Resolution(Outcome.PRESENT, existing.id)

        r = self.github.get_repo(user, repo)
        error = _remote_error(r)
        if error:
            logger.warning("Cannot find repo %s/%s on GitHub (%s)", user, repo, error)
            return Resolution(Outcome.UNRESOLVED)

        project_id, created = self.store.insert_or_get(
            Project,
            url=_value(r, "url"),
            owner=owner.id,
            name=_value(r, "name") or repo,
            description=_value(r, "description"),
            language=_value(r, "language"),
            created_at=parse_date(_value(r, "created_at")),
        )
        if not created:
            logger.debug("Repo %s/%s was stored meanwhile", user, repo)
            return Resolution(Outcome.PRESENT, project_id)

        logger.info("New repo %s/%s", user, repo)
        return Resolution(Outcome.CREATED, project_id)

    # --- commits ---

    def get_commit(self, user: str, repo: str, sha: str) -> Resolution:
        """Mirror one commit together with everything it points to."""
        if not SHA_RE.fullmatch(sha or ""):
            logger.error("Ignoring commit %s", sha)
            return Resolution(Outcome.REJECTED)

        owner = self.ensure_user(user)
        if not owner.resolved:
            logger.warning("Cannot mirror commit %s without owner %s", sha, user)
            return Resolution(Outcome.UNRESOLVED)

        project = self.ensure_repo(user, repo)
        if not project.resolved:
            logger.warning("Cannot mirror commit %s without %s/%s", sha, user, repo)
            return Resolution(Outcome.UNRESOLVED)

        if self.store.exists(Commit, sha=sha):
            logger.debug("Commit %s exists", sha)
            return Resolution(Outcome.PRESENT, sha)

        c = self.github.get_commit(user, repo, sha)
        error = _remote_error(c)
        if error:
            logger.warning("Cannot find commit %s in %s/%s (%s)", sha, user, repo, error)
            return Resolution(Outcome.UNRESOLVED)

        author_id = self._commit_user(c, "author", sha)
        committer_id = self._commit_user(c, "committer", sha)

        _, created = self.store.insert_or_get(
            Commit,
            sha=sha,
            message=_value(c, "commit.message") or _value(c, "message"),
            login_id=owner.id,
            author_id=author_id,
            committer_id=committer_id,
        )
        if not created:
            logger.debug("Commit %s was stored meanwhile", sha)
            return Resolution(Outcome.PRESENT, sha)

        logger.info("New commit %s", sha)
        return Resolution(Outcome.CREATED, sha)

    def _commit_user(self, c, role: str, sha: str):
        # git metadata carries an email; GitHub adds a login when it can
        # match the email to an account
        for identifier in (_value(c, f"commit.{role}.email"), _value(c, f"{role}.login")):
            if not identifier:
                continue
            resolution = self.ensure_user(identifier)
            if resolution.resolved:
                return resolution.id

        logger.warning("Commit %s: %s could not be resolved, storing without it", sha, role)
        return None

    def get_events(self):
        """Current GitHub events, as returned by the API."""
        return self.github.get_events()
