"""
Shared configuration for all orderflow services.

Values are read from the environment once at import time. Each service's
``database.py`` reads its own ``DATABASE_URL``.
"""
import logging
import os

# JWT settings (shared by every service that validates tokens)
SECRET_KEY = os.getenv("JWT_SECRET", "09d25e094faa6ca2556c818166b7a9563b93f7099f6f0f4caa6cf63b88e8d3e7")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
SERVICE_TOKEN_EXPIRE_MINUTES = int(os.getenv("SERVICE_TOKEN_EXPIRE_MINUTES", "60"))

# Internal service URLs (Docker network hostnames by default)
AUTH_SERVICE_URL = os.getenv("AUTH_SERVICE_URL", "http://auth:8000")
CONTACT_SERVICE_URL = os.getenv("CONTACT_SERVICE_URL", "http://contact:8000")
INVENTORY_SERVICE_URL = os.getenv("INVENTORY_SERVICE_URL", "http://inventory:8000")

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "5.0"))  # seconds

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Services allowed to request a service-identity token
KNOWN_SERVICES = ("sales", "purchase", "contact", "inventory")


def service_secret(service_name: str) -> str:
    """
    Pre-shared secret proving a service's identity to the auth service.

    Args:
        service_name: Name of the calling service (e.g. "sales")

    Returns:
        The secret from ``<NAME>_SERVICE_SECRET``, or a value derived from the JWT secret
    """
    return os.getenv(f"{service_name.upper()}_SERVICE_SECRET", f"{SECRET_KEY}_{service_name}")


def configure_logging() -> None:
    """Install the process-wide log format and level."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
