from pydantic import computed_field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from dockerproxy.packages.registry_proxy.routing import (
    DEFAULT_ROUTES,
    PRIMARY_REGISTRY_URL,
)
from dockerproxy.utils.settings_utils import DockerSecretsSettingsSource


class GeneralConfig(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = ""
    PROJECT_URL: str = "https://github.com/ciiiii/cloudflare-docker-proxy"


class RoutingConfig(BaseSettings):
    CUSTOM_DOMAIN: str = "example.com"
    """Domain suffix every routed hostname is derived from
    e.g. docker.example.com, quay.example.com
    """

    ROUTES: dict[str, str] = dict(DEFAULT_ROUTES)
    """Subdomain label -> upstream registry base URL"""

    PROXY_SERVICE_NAME: str = "docker-registry-proxy"


class DebugConfig(BaseSettings):
    DEBUG: bool = False
    TARGET_UPSTREAM: str = PRIMARY_REGISTRY_URL
    """Upstream used for unmapped hostnames, only when DEBUG is set"""

    @computed_field
    @property
    def FALLBACK_UPSTREAM(self) -> str | None:
        if self.DEBUG and self.TARGET_UPSTREAM:
            return self.TARGET_UPSTREAM
        return None


class UpstreamConfig(BaseSettings):
    UPSTREAM_CONNECT_TIMEOUT: float = 30.0
    UPSTREAM_READ_TIMEOUT: float = 1800.0  # 30 minutes for large layer downloads
    UPSTREAM_WRITE_TIMEOUT: float = 1800.0  # 30 minutes for large layer uploads
    UPSTREAM_POOL_TIMEOUT: float = 10.0


class Settings(
    GeneralConfig,
    RoutingConfig,
    DebugConfig,
    UpstreamConfig,
    BaseSettings,
):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.prod", ".env.test"),
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Define the priority order for settings sources.

        Priority (highest to lowest):
        1. Docker secrets from files (reads *_FILE env vars)
        2. Environment variables
        3. .env files
        4. Default values
        """
        return (
            init_settings,
            DockerSecretsSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def validate_custom_domain(self):
        if not self.CUSTOM_DOMAIN or self.CUSTOM_DOMAIN.startswith("."):
            raise ValueError(
                "CUSTOM_DOMAIN must be a bare domain such as 'example.com'. "
                "Routed hostnames are built as '<label>.<CUSTOM_DOMAIN>'."
            )
        return self


settings = Settings()
