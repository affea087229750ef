from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# ──────────────────────────────────────────────
# Paths
# ──────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent          # src/


# ──────────────────────────────────────────────
# Settings (from environment variables / .env)
# ──────────────────────────────────────────────
class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # CORS settings
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000"

    # Upload settings
    max_upload_size: int = 2 * 1024 * 1024  # 2 MB
    allowed_content_types: str = "image/jpg,image/jpeg,image/png,image/webp"

    # Storage settings
    upload_dir: Path = BASE_DIR / "uploads"
    public_url: str = "http://localhost:8000/files"
    max_storage_files: int = 500

    # Application settings
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def allowed_content_types_set(self) -> set[str]:
        """Parse allowed MIME types from comma-separated string."""
        return {ctype.strip().lower() for ctype in self.allowed_content_types.split(",")}


# Global settings instance
settings = Settings()

# Create upload directory if it doesn't exist
settings.upload_dir.mkdir(parents=True, exist_ok=True)
