import os
from dotenv import load_dotenv

load_dotenv()


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Cache
    CACHE_TTL_MINUTES = float(os.getenv("CACHE_TTL_MINUTES", "60"))
    CACHE_CLEANUP_INTERVAL_SECONDS = float(os.getenv("CACHE_CLEANUP_INTERVAL_SECONDS", "300"))
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "10000"))

    # DNS
    DNS_TIMEOUT_SECONDS = float(os.getenv("DNS_TIMEOUT_SECONDS", "5"))
    DNS_LIFETIME_SECONDS = float(os.getenv("DNS_LIFETIME_SECONDS", "10"))
    DNS_NAMESERVERS = _split(os.getenv("DNS_NAMESERVERS", ""))

    # Storage
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")
    FIREBASE_SERVICE_ACCOUNT_PATH = os.getenv("FIREBASE_SERVICE_ACCOUNT_PATH", "")
    FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
    FIRESTORE_COLLECTION = os.getenv("FIRESTORE_COLLECTION", "domains")
