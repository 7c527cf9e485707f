# ghmirror/api/mirror_routes.py
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ghmirror.core.db import get_db
from ghmirror.github_client import GitHubClient, RemoteError
from ghmirror.models import Commit, Project, User
from ghmirror.services.entity_store import EntityStore
from ghmirror.services.mirror import MirrorEngine, Outcome, Resolution

router = APIRouter(prefix="/mirror", tags=["mirror"])

# ----- Pydantic schemas -----

class ResolutionOut(BaseModel):
    outcome: str
    id: int | str | None = None

class StatusOut(BaseModel):
    users: int
    projects: int
    commits: int
    api_calls: int

# ----- Dependencies -----

# One client (and so one rate limiter) per app, installed by main.lifespan.
_github: GitHubClient | None = None

def set_github_client(client: GitHubClient | None):
    global _github
    _github = client

def get_github() -> GitHubClient:
    if _github is None:
        raise RuntimeError("No GitHub client installed; run the app through its lifespan")
    return _github

def get_mirror(db: Session = Depends(get_db), github: GitHubClient = Depends(get_github)) -> MirrorEngine:
    return MirrorEngine(EntityStore(db), github)


def _out(resolution: Resolution) -> ResolutionOut:
    return ResolutionOut(outcome=resolution.outcome.value, id=resolution.id)

# ----- Routes -----

@router.post("/users/{identifier}", response_model=ResolutionOut)
def mirror_user(identifier: str, mirror: MirrorEngine = Depends(get_mirror)):
    try:
        return _out(mirror.ensure_user(identifier))
    except RemoteError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/repos/{owner}/{repo}", response_model=ResolutionOut)
def mirror_repo(owner: str, repo: str, mirror: MirrorEngine = Depends(get_mirror)):
    try:
        return _out(mirror.ensure_repo(owner, repo))
    except RemoteError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/commits/{owner}/{repo}/{sha}", response_model=ResolutionOut)
def mirror_commit(owner: str, repo: str, sha: str, mirror: MirrorEngine = Depends(get_mirror)):
    try:
        resolution = mirror.get_commit(owner, repo, sha)
    except RemoteError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    if resolution.outcome is Outcome.REJECTED:
        raise HTTPException(status_code=400, detail=f"Invalid commit sha: {sha}")
    return _out(resolution)


@router.get("/status", response_model=StatusOut)
def mirror_status(mirror: MirrorEngine = Depends(get_mirror)):
    store = mirror.store
    return StatusOut(
        users=store.count(User),
        projects=store.count(Project),
        commits=store.count(Commit),
        api_calls=mirror.github.num_api_calls,
    )
