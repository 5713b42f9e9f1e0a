from datetime import time
from typing import Any
from urllib.parse import quote_plus
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración de la aplicación utilizando Pydantic BaseSettings.
    Carga automáticamente las variables de entorno.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Clinic Scheduling API"
    PROJECT_DESCRIPTION: str = "Motor de agendamiento y disponibilidad de citas veterinarias"
    VERSION: str = "0.1.0"

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="Host de PostgreSQL")
    DB_PORT: int = Field(5432, description="Puerto de PostgreSQL")
    DB_NAME: str = Field("clinic", description="Nombre de la base de datos")
    DB_USER: str = Field("postgres", description="Usuario de PostgreSQL")
    DB_PASSWORD: str | None = Field(None, description="Contraseña de PostgreSQL")
    DB_ECHO: bool = Field(False, description="Log SQL queries (solo para debug)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Tamaño del pool de conexiones")
    DB_MAX_OVERFLOW: int = Field(30, description="Máximo overflow del pool")
    DB_POOL_RECYCLE: int = Field(3600, description="Reciclar conexiones cada X segundos")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout para obtener conexión del pool")

    # Clinic hours and scheduling rules
    CLINIC_OPEN_TIME: time = Field(time(7, 0), description="Hora de apertura de la clínica")
    CLINIC_CLOSE_TIME: time = Field(time(17, 0), description="Hora de cierre de la clínica")
    CLINIC_TIMEZONE: str = Field("UTC", description="Zona horaria de la clínica (IANA)")
    DEFAULT_BUFFER_MINUTES: int = Field(10, description="Minutos de margen tras cada cita")
    DEFAULT_DURATION_MINUTES: int = Field(30, description="Duración por defecto de una cita")
    MAX_DURATION_MINUTES: int = Field(24 * 60, description="Duración máxima aceptada para una cita")
    MAX_BUFFER_MINUTES: int = Field(24 * 60, description="Margen máximo aceptado tras una cita")
    SLOT_STEP_MINUTES: int = Field(15, description="Paso de búsqueda al generar slots")
    DEFAULT_APPOINTMENT_TYPE: str = Field("general consultation", description="Tipo de cita por defecto")

    # Roles (issued by the identity provider)
    PRACTITIONER_ROLE: str = Field("admin", description="Rol con capacidad de veterinario")
    ADMIN_ROLE: str = Field("admin", description="Rol administrativo con acceso total")

    # Listing
    LIST_DEFAULT_LIMIT: int = Field(50, description="Tamaño de página por defecto")
    LIST_MAX_LIMIT: int = Field(200, description="Tamaño de página máximo")

    # Application Settings
    DEBUG: bool = Field(False, description="Modo de depuración")
    ENVIRONMENT: str = Field("production", description="Entorno de ejecución")
    LOG_LEVEL: str = Field("INFO", description="Nivel de logging")
    LOG_JSON: bool = Field(False, description="Emitir logs en formato JSON")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Orígenes permitidos para CORS")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignorar campos extras en lugar de generar un error
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if isinstance(value, str) and not value.strip().startswith("["):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @field_validator(
        "DEFAULT_BUFFER_MINUTES",
        "DEFAULT_DURATION_MINUTES",
        "SLOT_STEP_MINUTES",
        "MAX_DURATION_MINUTES",
        "MAX_BUFFER_MINUTES",
    )
    @classmethod
    def validate_positive_minutes(cls, v):
        if v <= 0:
            raise ValueError("Minute values must be positive")
        return v

    @field_validator("CLINIC_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def validate_clinic_hours(self) -> "Settings":
        if self.CLINIC_OPEN_TIME >= self.CLINIC_CLOSE_TIME:
            raise ValueError("CLINIC_OPEN_TIME must be earlier than CLINIC_CLOSE_TIME")
        if self.LIST_DEFAULT_LIMIT > self.LIST_MAX_LIMIT:
            raise ValueError("LIST_DEFAULT_LIMIT cannot exceed LIST_MAX_LIMIT")
        if self.DEFAULT_DURATION_MINUTES > self.MAX_DURATION_MINUTES:
            raise ValueError("DEFAULT_DURATION_MINUTES cannot exceed MAX_DURATION_MINUTES")
        if self.DEFAULT_BUFFER_MINUTES > self.MAX_BUFFER_MINUTES:
            raise ValueError("DEFAULT_BUFFER_MINUTES cannot exceed MAX_BUFFER_MINUTES")
        return self

    @computed_field
    @property
    def database_url(self) -> str:
        """Construye la URL de conexión a PostgreSQL con credenciales escapadas"""
        user = quote_plus(self.DB_USER)
        if self.DB_PASSWORD:
            return f"postgresql://{user}:{quote_plus(self.DB_PASSWORD)}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{user}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def clinic_tz(self) -> ZoneInfo:
        """Zona horaria de la clínica como objeto ZoneInfo"""
        return ZoneInfo(self.CLINIC_TIMEZONE)


# Singleton para configuración
_settings_instance = None


def get_settings() -> Settings:
    """
    Retorna una instancia cacheada de la configuración.
    Esto evita cargar las variables de entorno múltiples veces.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
