import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./cleaning.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Authentication
    AUTH_DISABLED = bool(data.get("AUTH_DISABLED", False))
    JWT_SECRET = data.get("JWT_SECRET", "change-me-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_MINUTES = data.get("JWT_EXPIRES_MINUTES", 60 * 24 * 7)

    # Transactional email
    EMAIL_PROVIDER = data.get("EMAIL_PROVIDER", "log")  # log | resend
    EMAIL_API_KEY = data.get("EMAIL_API_KEY", "")
    EMAIL_API_URL = data.get("EMAIL_API_URL", "https://api.resend.com/emails")
    EMAIL_FROM = data.get("EMAIL_FROM", "Bubblebee Cleaning <hello@bubblebee.com>")
    BUSINESS_NOTIFICATION_EMAIL = data.get("BUSINESS_NOTIFICATION_EMAIL", None)

    # Card payments
    STRIPE_SECRET_KEY = data.get("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET = data.get("STRIPE_WEBHOOK_SECRET", "")
    FRONTEND_URL = data.get("FRONTEND_URL", "http://localhost:3000")
    CURRENCY = data.get("CURRENCY", "usd")

    # Business rules
    COMPANY_NAME = data.get("COMPANY_NAME", "Bubblebee Cleaning")
    TAX_RATE = str(data.get("TAX_RATE", "0.08"))  # kept as str, parsed to Decimal
    INVOICE_DUE_DAYS = data.get("INVOICE_DUE_DAYS", 14)
    INVOICE_PREFIX = data.get("INVOICE_PREFIX", "INV-")
    INVOICE_START_NUMBER = data.get("INVOICE_START_NUMBER", 1001)
    AUTO_INVOICE_ON_COMPLETION = bool(data.get("AUTO_INVOICE_ON_COMPLETION", True))

    # Background jobs
    SCHEDULER_ENABLED = bool(data.get("SCHEDULER_ENABLED", True))
    RECURRING_HORIZON_DAYS = data.get("RECURRING_HORIZON_DAYS", 14)
    REMINDER_INTERVAL_SECONDS = data.get("REMINDER_INTERVAL_SECONDS", 86400)  # Daily
    RECURRING_INTERVAL_SECONDS = data.get("RECURRING_INTERVAL_SECONDS", 86400)  # Daily
    OVERDUE_INTERVAL_SECONDS = data.get("OVERDUE_INTERVAL_SECONDS", 86400)  # Daily
    SESSION_CLEANUP_INTERVAL_SECONDS = data.get("SESSION_CLEANUP_INTERVAL_SECONDS", 3600)  # Hourly
    INVENTORY_CHECK_INTERVAL_SECONDS = data.get("INVENTORY_CHECK_INTERVAL_SECONDS", 604800)  # Weekly

    # Bootstrap
    DEFAULT_ADMIN_EMAIL = data.get("DEFAULT_ADMIN_EMAIL", "admin@bubblebee.com")
