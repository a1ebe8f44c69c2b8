# backend/kontainar/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/kontainar.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///kontainar.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "sql" persists collections in the storage_entries table, "memory" keeps
    # them in-process (lost on restart).
    STORAGE_BACKEND = os.environ.get("KONTAINAR_STORAGE_BACKEND", "sql")

    # Seed absent collections when the app starts.
    SEED_ON_STARTUP = _env_flag("KONTAINAR_SEED_ON_STARTUP")

    PURCHASE_TAX_RATE = float(os.environ.get("KONTAINAR_PURCHASE_TAX_RATE", "0.10"))

    ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "KONTAINAR_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    }


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STORAGE_BACKEND = "sql"
    SEED_ON_STARTUP = False
