import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "ramani_fashion")

# customer and admin tokens are signed with different secrets
JWT_SECRET = os.getenv("SESSION_SECRET", "ramani-fashion-customer-session-secret")
ADMIN_JWT_SECRET = os.getenv("ADMIN_JWT_SECRET", "ramani-fashion-admin-session-secret-key")
JWT_ALGO = "HS256"
ADMIN_TOKEN_TTL_HOURS = int(os.getenv("ADMIN_TOKEN_TTL_HOURS", "24"))

CUSTOMER_OTP_TTL_MINUTES = int(os.getenv("CUSTOMER_OTP_TTL_MINUTES", "10"))
ADMIN_OTP_TTL_MINUTES = int(os.getenv("ADMIN_OTP_TTL_MINUTES", "5"))
TEST_OTP = os.getenv("TEST_OTP", "123456")
EXPOSE_TEST_OTP = _flag("EXPOSE_TEST_OTP", "true")

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@ramanifashion.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
ADMIN_MOBILE = os.getenv("ADMIN_MOBILE", "9876543210")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
