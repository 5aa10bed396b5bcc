from decimal import Decimal

from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="gst_returns", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # GSTR-1
    # Inter-state invoices to unregistered buyers above this value are B2CL
    B2CL_THRESHOLD: Decimal = Field(
        default=Decimal("250000"),
        validation_alias=AliasChoices("B2CL_THRESHOLD", "b2cl_threshold"),
    )
    # Last spreadsheet row referenced by the summary formulas
    SHEET_MAX_ROW: int = Field(default=1048576, validation_alias=AliasChoices("SHEET_MAX_ROW", "sheet_max_row"))
    DEFAULT_UQC: str = Field(default="NOS", validation_alias=AliasChoices("DEFAULT_UQC", "default_uqc"))


settings = Settings()
