# vidvault/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _csv(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "VidVault API"
    SERVICE_NAME: str = "vidvault-api"
    VERSION: str = "1.0.0"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # Frontend origin (added to CORS_ORIGINS below)
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:3001",
    ]

    # Database. DATABASE_URL wins; otherwise the DSN is built from the parts.
    database_url: str | None = os.getenv("DATABASE_URL")
    db_host: str = os.getenv("DB_HOST", "127.0.0.1")
    db_port: int = int(os.getenv("DB_PORT", "5432"))
    db_username: str = os.getenv("DB_USERNAME", "postgres")
    db_password: str = os.getenv("DB_PASSWORD", "postgres")
    db_database: str = os.getenv("DB_DATABASE", "vidvault")
    db_encrypt: bool = _flag("DB_ENCRYPT")
    db_trust_server_certificate: bool = _flag("DB_TRUST_SERVER_CERTIFICATE", "true")

    # Mail transport (SMTP)
    mail_host: str = os.getenv("MAIL_HOST", "smtp.gmail.com")
    mail_port: int = int(os.getenv("MAIL_PORT", "587"))
    mail_secure: bool = _flag("MAIL_SECURE")  # True = implicit TLS (465), False = STARTTLS
    mail_user: str | None = os.getenv("MAIL_USER")
    mail_password: str | None = os.getenv("MAIL_PASSWORD")
    mail_from: str | None = os.getenv("MAIL_FROM")
    mail_from_name: str = os.getenv("MAIL_FROM_NAME", "VidVault")
    mail_timeout: float = float(os.getenv("MAIL_TIMEOUT", "10"))

    # Session credentials (JWT)
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    jwt_expires_minutes: int = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))
    jwt_issuer: str = os.getenv("JWT_ISSUER", "vidvault-api")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "vidvault-web")

    # Admin access. Empty ADMIN_EMAILS = any authenticated user may use admin routes.
    admin_emails: list[str] = _csv("ADMIN_EMAILS")
    admin_email: str | None = os.getenv("ADMIN_EMAIL")

    # Rate limiting (slowapi syntax)
    rate_limit_default: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")

    @property
    def is_production(self) -> bool:
        return self.env.lower() in ("prod", "production")

    @property
    def mail_configured(self) -> bool:
        return bool(self.mail_user and self.mail_password)

    @property
    def cors_origins(self) -> list[str]:
        origins = list(self.CORS_ORIGINS)
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        url = (
            f"postgres://{self.db_username}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_database}"
        )
        if self.db_encrypt:
            # asyncpg ssl modes: "require" encrypts without verifying the certificate
            ssl_mode = "require" if self.db_trust_server_certificate else "verify-full"
            url += f"?ssl={ssl_mode}"
        return url


settings = Settings()  # Instantiate configuration
