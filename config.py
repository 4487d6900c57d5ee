import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./authcore.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = data.get("ACCESS_TOKEN_EXPIRE_MINUTES", 15)
    REFRESH_TOKEN_EXPIRE_DAYS = data.get("REFRESH_TOKEN_EXPIRE_DAYS", 7)

    # Credentials
    BCRYPT_ROUNDS = data.get("BCRYPT_ROUNDS", 10)
    LOCKOUT_MAX_ATTEMPTS = data.get("LOCKOUT_MAX_ATTEMPTS", 5)
    LOCKOUT_DURATION_MINUTES = data.get("LOCKOUT_DURATION_MINUTES", 15)
    DEFAULT_ROLE = data.get("DEFAULT_ROLE", "USER")
    PASSWORD_RESET_EXPIRE_MINUTES = data.get("PASSWORD_RESET_EXPIRE_MINUTES", 60)

    # Session cleanup
    REVOKED_SESSION_RETENTION_DAYS = data.get("REVOKED_SESSION_RETENTION_DAYS", 30)
    CLEANUP_INTERVAL_SECONDS = data.get("CLEANUP_INTERVAL_SECONDS", 86400)

    # Refresh cookie
    REFRESH_COOKIE_NAME = data.get("REFRESH_COOKIE_NAME", "refresh_token")
    REFRESH_COOKIE_PATH = data.get("REFRESH_COOKIE_PATH", "/auth")
    REFRESH_COOKIE_SECURE = bool(data.get("REFRESH_COOKIE_SECURE", True))
    REFRESH_COOKIE_SAMESITE = data.get("REFRESH_COOKIE_SAMESITE", "strict")

    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
