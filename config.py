import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as groundbook.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "groundbook.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "groundbook_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = int(os.getenv("SESSION_LIFETIME_SECONDS", str(8 * 60 * 60)))

    # Idle timeout: 20 minutes
    IDLE_TIMEOUT_SECONDS = int(os.getenv("IDLE_TIMEOUT_SECONDS", str(20 * 60)))

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # Pricing
    DEFAULT_PER_HOUR = int(os.getenv("DEFAULT_PER_HOUR", "500"))   # used when a ground has no rate
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "INR")
    CONVENIENCE_FEE_RATE = os.getenv("CONVENIENCE_FEE_RATE", "0.02")  # 2% of discounted base

    # Static grounds that are bookable without a row in the grounds table
    FALLBACK_CATALOG_PATH = os.getenv(
        "FALLBACK_CATALOG_PATH",
        os.path.join(BASE_DIR, "data", "fallback_grounds.json")
    )

    # "sql" (default) or "memory" for a throwaway demo store
    BOOKING_STORE = os.getenv("BOOKING_STORE", "sql")

    # Regenerate a booking code this many times on collision
    BOOKING_CODE_ATTEMPTS = 3
    BOOKINGS_PAGE_LIMIT_MAX = 100

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
