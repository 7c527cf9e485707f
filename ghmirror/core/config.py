# ghmirror/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()  # load from .env

class Settings:
    # mirror.urlbase, mirror.urlbase_v2, mirror.reqrate
    MIRROR_URLBASE: str = os.getenv("MIRROR_URLBASE", "https://api.github.com/")
    MIRROR_URLBASE_V2: str = os.getenv("MIRROR_URLBASE_V2", "https://github.com/api/v2/json/")
    MIRROR_REQRATE: int = int(os.getenv("MIRROR_REQRATE", "60"))
    MIRROR_WINDOW_SECONDS: int = int(os.getenv("MIRROR_WINDOW_SECONDS", "60"))

    MIRROR_GITHUB_TOKEN: str = os.getenv("MIRROR_GITHUB_TOKEN", "")
    MIRROR_HTTP_TIMEOUT: float = float(os.getenv("MIRROR_HTTP_TIMEOUT", "30"))
    MIRROR_LOG_LEVEL: str = os.getenv("MIRROR_LOG_LEVEL", "INFO")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///github.db")

settings = Settings()
