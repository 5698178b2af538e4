from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "healthplus-clinic"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite+pysqlite:///./clinic.db"
    DB_AUTO_MIGRATE: bool = True
    REDIS_URL: str = "redis://localhost:6379/0"

    CORS_ORIGINS: str = "*"

    JWT_SECRET: str = "change_me_clinic"
    JWT_TTL_HOURS: int = 24

    OTP_TTL_MINUTES: int = 10
    OTP_REGISTRATION_WINDOW_MINUTES: int = 30
    # Returns the raw code in the send-email response when delivery fails.
    # Only meant for demo deployments without a working mail provider.
    OTP_DELIVERY_DEGRADED_MODE: bool = False
    OTP_PURGE_RETENTION_HOURS: int = 24

    EMAIL_PROVIDER: str = "dummy"  # dummy | smtp | resend
    EMAIL_FROM: str = "HealthPlus Clinic <onboarding@resend.dev>"
    OTP_EMAIL_SUBJECT: str = "Your HealthPlus Clinic Verification OTP"
    RESEND_API_URL: str = "https://api.resend.com/emails"
    RESEND_API_KEY: str = ""
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False

    ADMIN_EMAIL: str = "admin@healthplus.com"
    ADMIN_PASSWORD: str = "change_me_admin"

    DOCTOR_SEED_ENABLED: bool = True
    DOCTOR_SEED_PASSWORD: str = "doctor123"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
