import os
from decimal import Decimal

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-key")

    # SQLite file next to the package unless DATABASE_URL points elsewhere
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "gymflow.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Standard bookings allowed in one trainer slot. The booking form and the
    # calendar overview historically used different limits; both stay explicit.
    BOOKING_SLOT_CAPACITY = int(os.getenv("BOOKING_SLOT_CAPACITY", "3"))
    CALENDAR_SLOT_CAPACITY = int(os.getenv("CALENDAR_SLOT_CAPACITY", "4"))

    # 0 = Monday ... 6 = Sunday
    CLOSED_WEEKDAY = int(os.getenv("CLOSED_WEEKDAY", "6"))

    # Which stored time-slot profile is in effect: "normal" or "holiday"
    SLOT_PROFILE = os.getenv("SLOT_PROFILE", "normal")

    # Wall clock used by the status job
    TIMEZONE = os.getenv("TIMEZONE", "Europe/Istanbul")

    # Fraction charged on credit card payments, e.g. 0.03
    CARD_COMMISSION_RATE = Decimal(os.getenv("CARD_COMMISSION_RATE", "0"))

    AUDIT_LOGS_PER_PAGE = int(os.getenv("AUDIT_LOGS_PER_PAGE", "50"))

    # JSON API: forms are fed from request bodies, no CSRF tokens
    WTF_CSRF_ENABLED = False

    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    CARD_COMMISSION_RATE = Decimal("0")
    BOOKING_SLOT_CAPACITY = 3
    CALENDAR_SLOT_CAPACITY = 4
    CLOSED_WEEKDAY = 6
    SLOT_PROFILE = "normal"
