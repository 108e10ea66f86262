# backend/mealvilla/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/mealvilla.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///mealvilla.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upper bound (seconds) for a single store call: connect, lock wait, pool checkout
    STORE_TIMEOUT_SECONDS = float(os.environ.get("STORE_TIMEOUT_SECONDS", "5"))
    STORE_RETRY_ATTEMPTS = int(os.environ.get("STORE_RETRY_ATTEMPTS", "3"))

    # Login emails are derived as "{staff_id}@{STAFF_EMAIL_DOMAIN}"
    STAFF_EMAIL_DOMAIN = os.environ.get("STAFF_EMAIL_DOMAIN", "mealvilla.com")
    DEFAULT_INITIAL_PASSWORD = os.environ.get("DEFAULT_INITIAL_PASSWORD", "password")
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Calendar day boundaries for the daily sales entry
    BUSINESS_TIMEZONE = os.environ.get("BUSINESS_TIMEZONE", "Africa/Lagos")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
