# ghmirror/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ghmirror.api import mirror_routes
from ghmirror.core.db import init_db
from ghmirror.core.logging_config import configure_logging
from ghmirror.github_client import GitHubClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Create the schema on first start against an empty store
    init_db()

    github = GitHubClient()
    mirror_routes.set_github_client(github)

    yield

    github.close()
    mirror_routes.set_github_client(None)


def create_app() -> FastAPI:
    app = FastAPI(title="GitHub Mirror", lifespan=lifespan)
    app.include_router(mirror_routes.router)
    return app


app = create_app()
