from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    SITE_NAME: str = "Goc Truyen"

    # Where favorites and reading history live: "sql" (the main database)
    # or "memory" (per-process, lost on restart; handy for local demos).
    TRACKING_BACKEND: str = "sql"

    # Bootstrap admin, created at startup when no user has this email.
    # Leave ADMIN_PASSWORD empty to skip the bootstrap entirely.
    ADMIN_EMAIL: str = "admin@goctruyen.local"
    ADMIN_PASSWORD: str = ""
    SEED_GENRES: bool = True
    # Create missing tables at startup (SQLite / dev). Production uses Alembic.
    AUTO_CREATE_TABLES: bool = False

    # Cover images and comic pages
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_SIZE: int = 10_485_760  # 10 MB
    ALLOWED_IMAGE_TYPES: list[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]

    # SMTP is optional, used for admin notifications when content is reported.
    # If SMTP_HOST is empty, reports are logged only.
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_TLS: bool = True
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = ""
    SMTP_ADMIN_EMAIL: str = ""

    model_config = {"env_file": ".env"}


settings = Settings()
