import logging
import os

from dotenv import load_dotenv

# Module logger only; handlers are configured by utils.logger / gunicorn
logger = logging.getLogger(__name__)

if not load_dotenv():
    logger.info(".env file not found, using process environment only")


def get_required_env(var_name: str) -> str:
    """
    Return a mandatory environment variable.

    Raises:
        ValueError: If the variable is missing or empty.
    """
    value = os.getenv(var_name)
    if not value:
        error_msg = f"Missing required environment variable: {var_name}"
        logger.critical(error_msg)
        raise ValueError(error_msg)
    return value


def validate_port(port_str: str, name: str = "port") -> int:
    """
    Validate a TCP port number given as a string.

    Raises:
        ValueError: If the value is not an integer in 1..65535.
    """
    try:
        port_int = int(port_str)
        if not 1 <= port_int <= 65535:
            raise ValueError(f"{name} must be in range 1..65535")
        return port_int
    except ValueError as e:
        logger.critical("Invalid %s: %s", name, e)
        raise


def get_bool_env(var_name: str, default: bool) -> bool:
    return os.getenv(var_name, str(default)).strip().lower() in ("1", "true", "yes", "on")


def get_float_env(var_name: str, default: float) -> float:
    raw = os.getenv(var_name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.critical("Invalid float for %s: %r", var_name, raw)
        raise


def get_int_env(var_name: str, default: int) -> int:
    raw = os.getenv(var_name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.critical("Invalid integer for %s: %r", var_name, raw)
        raise


class Settings:
    """Application settings read once from the environment."""

    def __init__(self):
        # --- Application ---
        self.APP_NAME = os.getenv("APP_NAME", "storefront")
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # --- Database ---
        self.DATABASE_URL = self._build_database_url()
        self.DB_OP_TIMEOUT = get_float_env("DB_OP_TIMEOUT", 5.0)
        self.DB_ECHO = get_bool_env("DB_ECHO", False)

        # --- Redis ---
        self.REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
        self.REDIS_PORT = validate_port(os.getenv("REDIS_PORT", "6379"), "REDIS_PORT")
        self.REDIS_DB = get_int_env("REDIS_DB", 0)
        self.REDIS_PASSWORD = os.getenv("REDIS_PASSWORD") or None
        # When disabled, cache and guest sessions live in process memory (dev/tests only)
        self.REDIS_ENABLED = get_bool_env("REDIS_ENABLED", True)
        if self.REDIS_PASSWORD:
            self.REDIS_URL = f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        else:
            self.REDIS_URL = f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

        # --- Cache ---
        self.CACHE_OP_TIMEOUT = get_float_env("CACHE_OP_TIMEOUT", 0.5)
        self.CACHE_SCHEMA_VERSION = get_int_env("CACHE_SCHEMA_VERSION", 1)
        self.CACHE_INVALIDATION = os.getenv("CACHE_INVALIDATION", "prefix").lower()
        if self.CACHE_INVALIDATION not in ("prefix", "generation"):
            logger.critical("CACHE_INVALIDATION must be 'prefix' or 'generation'")
            raise ValueError(f"Unknown CACHE_INVALIDATION: {self.CACHE_INVALIDATION}")
        self.CACHE_TTL_TAXONOMY = get_int_env("CACHE_TTL_TAXONOMY", 3600)
        self.CACHE_TTL_PRODUCT = get_int_env("CACHE_TTL_PRODUCT", 1800)
        self.CACHE_TTL_FEATURED = get_int_env("CACHE_TTL_FEATURED", 1800)
        self.CACHE_TTL_OFFER = get_int_env("CACHE_TTL_OFFER", 1800)

        # --- Guest sessions ---
        self.GUEST_TTL = get_int_env("GUEST_TTL", 86400)
        self.GUEST_OP_TIMEOUT = get_float_env("GUEST_OP_TIMEOUT", 2.0)

        # --- Users ---
        self.BCRYPT_ROUNDS = get_int_env("BCRYPT_ROUNDS", 12)

        # --- Rate limiting ---
        self.RATE_LIMIT_ENABLED = get_bool_env("RATE_LIMIT_ENABLED", True)
        self.RATE_LIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")

    @staticmethod
    def _build_database_url() -> str:
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit

        db_host = os.getenv("DB_HOST")
        if not db_host:
            return "sqlite+aiosqlite:///./storefront.db"

        db_user = get_required_env("DB_USER")
        db_pass = os.getenv("DB_PASSWORD") or os.getenv("DB_PASS")
        if not db_pass:
            error_msg = "Missing required environment variable: DB_PASSWORD (or DB_PASS)"
            logger.critical(error_msg)
            raise ValueError(error_msg)
        db_port = validate_port(os.getenv("DB_PORT", "5432"), "DB_PORT")
        db_name = get_required_env("DB_NAME")

        # Password is never logged
        logger.info("Database configured: %s@%s:%s/%s", db_user, db_host, db_port, db_name)
        return f"postgresql+asyncpg://{db_user}:{db_pass}@{db_host}:{db_port}/{db_name}"


settings = Settings()
