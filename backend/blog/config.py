"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DB_URL: str
    SESSION_COOKIE_NAME: str
    SECURE_COOKIES: bool
    ALLOW_INSECURE_COOKIES: bool
    ALLOW_DEV_CORS: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DB_URL = os.getenv("DB_URL", f"sqlite:///{BASE / 'blog.db'}")
        self.SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "BLOGSESSION")
        self.SECURE_COOKIES = os.getenv("SECURE_COOKIES", "false").lower() == "true"
        self.ALLOW_INSECURE_COOKIES = os.getenv("ALLOW_INSECURE_COOKIES", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if not self.SESSION_COOKIE_NAME.strip():
            raise RuntimeError("SESSION_COOKIE_NAME must not be empty")
        if self.ENV != "dev" and not self.SECURE_COOKIES and not self.ALLOW_INSECURE_COOKIES:
            raise RuntimeError("SECURE_COOKIES must be enabled in non-dev environments")


settings = Settings()
