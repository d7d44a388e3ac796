"""Configuration settings for Link Realty."""
from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    """Base configuration class."""

    SECRET_KEY = os.environ.get("LINKREALTY_SECRET_KEY", "linkrealty-dev-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "LINKREALTY_DATABASE_URI", f"sqlite:///{BASE_DIR / 'linkrealty.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ENVIRONMENT = os.environ.get("LINKREALTY_ENV", "development")
    LOG_RETENTION = int(os.environ.get("LINKREALTY_LOG_RETENTION", 200))
    LOG_TIMEZONE = os.environ.get("LINKREALTY_LOG_TIMEZONE", "UTC")

    INITIAL_TOKENS = int(os.environ.get("LINKREALTY_INITIAL_TOKENS", 50))
    TOKEN_COST_PROPERTY_ANALYSIS = int(
        os.environ.get("LINKREALTY_COST_PROPERTY_ANALYSIS", 5)
    )
    TOKEN_COST_CONSULTANT_REQUEST = int(
        os.environ.get("LINKREALTY_COST_CONSULTANT_REQUEST", 15)
    )
    RESET_TOKENS_ON_LOGOUT = os.environ.get("LINKREALTY_RESET_TOKENS_ON_LOGOUT", "0") in {
        "1",
        "true",
        "yes",
    }

    REPORT_PROVIDER = os.environ.get("LINKREALTY_REPORT_PROVIDER", "sample")
    REPORT_DELAY_SECONDS = float(os.environ.get("LINKREALTY_REPORT_DELAY_SECONDS", 2))
