import warnings
from typing import List
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ── Known insecure default keys (must never be used in production) ──
_INSECURE_KEYS = {
    "change_this",
    "change_this_to_a_secure_random_string",
    "secret",
}


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    APP_NAME: str = "ImobHub Domínios"
    APP_ENV: str = "development"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "change_this"
    ALGORITHM: str = "HS256"

    # Database (DATABASE_URL wins over the POSTGRES_* parts)
    DATABASE_URL: str = ""
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "imobhub"
    DB_ECHO: bool = False

    # ── Platform domains ──
    PLATFORM_CANONICAL_HOST: str = "imobhub.automatech.app.br"   # alvo do CNAME
    PLATFORM_TARGET_IP: str = "76.76.21.21"                      # alvo do registro A
    DEFAULT_DOMAIN: str = "imobhub.automatech.app.br"
    LOCAL_DEV_SUFFIX: str = ".localhost"
    PASSTHROUGH_HOSTS: str = "localhost,127.0.0.1"
    BLOCKED_DOMAINS: str = "automatech.app.br,imobhub.automatech.app.br"

    # ── Tenant routing ──
    RESERVED_PATH_PREFIXES: str = "/dashboard,/api,/_next"       # prefixo livre
    RESERVED_PATHS: str = "/static,/docs,/redoc,/health,/metrics"  # segmento inteiro
    STOREFRONT_BASE_PATH: str = "/corretor"
    DOMAIN_NOT_FOUND_PATH: str = "/dominio-nao-encontrado"

    # ── DNS verification ──
    DNS_TIMEOUT_SECONDS: float = 5.0
    CUSTOM_DOMAIN_PLANS: str = "EXPERT,GRATUITO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @model_validator(mode="after")
    def _validate_production_security(self) -> "Settings":
        """Block startup if critical secrets are insecure in production / staging."""
        if self.APP_ENV in ("production", "staging"):
            if self.SECRET_KEY in _INSECURE_KEYS or len(self.SECRET_KEY) < 32:
                raise ValueError(
                    f"SECRET_KEY is insecure ('{self.SECRET_KEY[:8]}…'). "
                    "Set a strong random key (≥ 32 chars) in .env or environment."
                )
            if not self.DATABASE_URL and self.POSTGRES_PASSWORD in ("postgres", ""):
                raise ValueError(
                    "POSTGRES_PASSWORD is set to default 'postgres'. "
                    "Set a strong password in .env or environment."
                )
            if self.PLATFORM_TARGET_IP == "76.76.21.21":
                warnings.warn(
                    "PLATFORM_TARGET_IP is still the default value. "
                    "Set it to the platform's public IP for production.",
                    UserWarning,
                    stacklevel=2,
                )
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
        )

    @property
    def passthrough_hosts(self) -> List[str]:
        return [h.lower() for h in _split_csv(self.PASSTHROUGH_HOSTS)]

    @property
    def blocked_domains(self) -> List[str]:
        return [d.lower() for d in _split_csv(self.BLOCKED_DOMAINS)]

    @property
    def reserved_path_prefixes(self) -> tuple[str, ...]:
        return tuple(_split_csv(self.RESERVED_PATH_PREFIXES))

    @property
    def reserved_paths(self) -> tuple[str, ...]:
        return tuple(_split_csv(self.RESERVED_PATHS))

    @property
    def custom_domain_plans(self) -> List[str]:
        return [p.upper() for p in _split_csv(self.CUSTOM_DOMAIN_PLANS)]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_staging(self) -> bool:
        return self.APP_ENV == "staging"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

settings = Settings()
