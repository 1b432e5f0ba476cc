import os
from decimal import Decimal
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional


class Settings(BaseSettings):
    # Database settings
    # MySQL Configuration
    MYSQL_HOST: str = os.getenv("MYSQL_HOST", "localhost")
    MYSQL_USER: str = os.getenv("MYSQL_USER", "root")
    MYSQL_PASSWORD: str = os.getenv("MYSQL_PASSWORD", "")
    MYSQL_DATABASE: str = os.getenv("MYSQL_DATABASE", "talentdesk")
    MYSQL_PORT: int = int(os.getenv("MYSQL_PORT", "3306"))
    DATABASE_URL: Optional[str] = Field(default=os.getenv("DATABASE_URL"), validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    def assemble_db_connection(cls, v: Optional[str], info) -> str:
        if isinstance(v, str) and v:
            return v
        values = info.data
        return f"mysql+pymysql://{values.get('MYSQL_USER')}:{values.get('MYSQL_PASSWORD')}@{values.get('MYSQL_HOST')}:{values.get('MYSQL_PORT')}/{values.get('MYSQL_DATABASE')}"

    # JWT settings
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "super_secret_key_change_this_in_production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

    # Company registry (Pappers)
    PAPPERS_API_KEY: str = os.getenv("PAPPERS_API_KEY", "")
    PAPPERS_API_URL: str = os.getenv("PAPPERS_API_URL", "https://api.pappers.fr/v2/recherche")
    PAPPERS_TIMEOUT_SECONDS: float = float(os.getenv("PAPPERS_TIMEOUT_SECONDS", "10"))

    # Business defaults
    DEFAULT_COMMISSION_INBOUND: Decimal = Decimal(os.getenv("DEFAULT_COMMISSION_INBOUND", "20"))
    DEFAULT_COMMISSION_OUTBOUND: Decimal = Decimal(os.getenv("DEFAULT_COMMISSION_OUTBOUND", "30"))
    DELAI_PAIEMENT_JOURS: int = int(os.getenv("DELAI_PAIEMENT_JOURS", "30"))

    # Generated PDFs (defaults to the system temp dir)
    PDF_OUTPUT_DIR: Optional[str] = os.getenv("PDF_OUTPUT_DIR")

    # Frontend URL
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # App settings
    DEBUG: bool = os.getenv("DEBUG", "True") == "True"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
