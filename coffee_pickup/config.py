
import warnings
import os
from dotenv import load_dotenv

load_dotenv()


def parse_email_list(raw):
    return frozenset(
        email.strip().lower() for email in (raw or "").split(",") if email.strip()
    )


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True
    }

    BARISTA_EMAILS = parse_email_list(os.getenv("BARISTA_EMAILS"))
    BARISTA_INVITE_CODE = os.getenv("BARISTA_INVITE_CODE", "")
    ACCESS_TOKEN_MAX_AGE = int(os.getenv("ACCESS_TOKEN_MAX_AGE", 60 * 60))
    REFRESH_TOKEN_MAX_AGE = int(os.getenv("REFRESH_TOKEN_MAX_AGE", 60 * 60 * 24 * 30))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    if not SQLALCHEMY_DATABASE_URI:
        warnings.warn(
            "DATABASE_URL is not set. Falling back to local SQLite (sqlite:///local.db).",
            RuntimeWarning
        )
        SQLALCHEMY_DATABASE_URI = "sqlite:///local.db"
