"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. This keeps the signing material out of source code — the .env
file is gitignored, and .env.example provides a safe template for developers.

Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from gera.config import settings
    print(settings.CONTACT_EMAIL)
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Gera wallet card API.

    Required fields (no defaults) MUST be set in .env or environment:
      - APPLE_DEVELOPER_TEAM_ID: Team that owns the pass type identifier
      - PASS_CERTIFICATE: base64 of the PEM pass type certificate
      - PASS_PRIVATE_KEY: base64 of the PEM private key for that certificate
      - CONTACT_EMAIL: Shown on the back of every pass as the support contact
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Gera Wallet API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 8080

    # --- Pass template ---
    PASS_TYPE_IDENTIFIER: str = "pass.br.ufpe.cin.academy.gera"
    APPLE_DEVELOPER_TEAM_ID: str
    ORGANIZATION_NAME: str = "Gera"
    PASS_DESCRIPTION: str = "Cartão de Cobrança Gera"
    LOGO_TEXT: str = "Gera"
    SHARING_PROHIBITED: bool = False
    # Directory holding icon.png, logo.png and their @2x/@3x variants
    TEMPLATE_IMAGES_DIR: str = "assets/images"
    CONTACT_EMAIL: str

    # --- Signing ---
    # REQUIRED: base64-encoded PEM documents, decoded by gera.security
    PASS_CERTIFICATE: str
    PASS_PRIVATE_KEY: str
    PASS_PASSPHRASE: str = ""
    # Apple WWDR intermediate certificate, embedded in the signature when set
    WWDR_CERTIFICATE: str | None = None

    # --- Pass store ---
    PASS_STORE_BACKEND: Literal["memory", "database"] = "memory"
    PASS_STORE_CAPACITY: int = 1000
    # Only used by the "database" backend
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/gera.db"

    # --- Thumbnail fetch ---
    IMAGE_MAX_BYTES: int = 2 * 1024 * 1024
    IMAGE_RESPONSE_TIMEOUT: float = 1.0
    IMAGE_DEADLINE: float = 2.0


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
