import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "")
if not DATABASE_URL:
    raise ValueError("FATAL ERROR: DATABASE_URL is not set in the environment!")

# Hosted Postgres providers hand out plain postgres:// URLs
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = "postgresql+asyncpg://" + DATABASE_URL[len("postgres://"):]
elif DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = "postgresql+asyncpg://" + DATABASE_URL[len("postgresql://"):]

PORT = int(os.getenv("PORT", "8080"))
SQL_ECHO = _get_bool("SQL_ECHO", False)
SEED_PRODUCTS = _get_bool("SEED_PRODUCTS", True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Auth
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
TOKEN_REVOCATION_CHECK = _get_bool("TOKEN_REVOCATION_CHECK", False)
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
AUTH_COOKIE_NAME = "auth_token"
COOKIE_SECURE = _get_bool("COOKIE_SECURE", False)

# Square
SQUARE_APPLICATION_ID = os.getenv("SQUARE_APPLICATION_ID", "")
SQUARE_LOCATION_ID = os.getenv("SQUARE_LOCATION_ID", "")
SQUARE_ACCESS_TOKEN = os.getenv("SQUARE_ACCESS_TOKEN", "")
SQUARE_ENVIRONMENT = os.getenv("SQUARE_ENVIRONMENT", "sandbox").lower()
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "USD")
PAYMENT_TIMEOUT_SECONDS = float(os.getenv("PAYMENT_TIMEOUT_SECONDS", "15"))

# Rate limiting
RATE_LIMIT_ENABLED = _get_bool("RATE_LIMIT_ENABLED", True)
CHECKOUT_RATE_LIMIT = os.getenv("CHECKOUT_RATE_LIMIT", "10/minute")
LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "20/minute")

# Tracing is opt-in: no exporter is started unless an endpoint is configured
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "")
