# backend/storefront/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///storefront.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Engine-level isolation for the order workflow. SQLite ignores it and
    # serialises writers with BEGIN IMMEDIATE instead (see unit_of_work).
    TRANSACTION_ISOLATION_LEVEL = os.environ.get("TRANSACTION_ISOLATION_LEVEL", "READ COMMITTED")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Static identity provider table: "token=login:role1|role2,token2=login2:role"
    API_TOKENS = os.environ.get("API_TOKENS", "")

    # Resolve every status into typed constants at startup when the
    # reference table is already seeded.
    STATUS_CATALOG_WARMUP = os.environ.get("STATUS_CATALOG_WARMUP", "true").lower() == "true"
