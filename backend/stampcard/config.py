# backend/stampcard/config.py
from __future__ import annotations
import os


def _split_origins(value: str) -> set[str]:
    return {origin.strip() for origin in value.split(",") if origin.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Listening port for wsgi.py
    PORT = int(os.environ.get("PORT", "8080"))

    # Request bodies are small JSON documents
    MAX_CONTENT_LENGTH = 256 * 1024

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Absolute session lifetime; 0 keeps sessions until logout
    SESSION_TTL_SECONDS = int(os.environ.get("SESSION_TTL_SECONDS", str(24 * 60 * 60)))

    # JSON file with stores and users; built-in demo directory when unset
    DIRECTORY_FILE = os.environ.get("STAMPCARD_DIRECTORY_FILE")

    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
    ))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
