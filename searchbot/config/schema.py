"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/117.0.0.0 Safari/537.36"
)


class Base(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GoogleProviderConfig(Base):
    """Google HTML results page."""

    base_url: str = "https://www.google.com/search"
    # Leading #main blocks that are page chrome rather than results.
    skip_blocks: int = Field(default=1, ge=0)


class DuckDuckGoProviderConfig(Base):
    """DuckDuckGo two-step (vqd handshake) search."""

    base_url: str = "https://duckduckgo.com/"
    results_url: str = "https://links.duckduckgo.com/d.js"
    region: str = "wt-wt"
    safesearch: str = "off"  # on | moderate | off


class SerperProviderConfig(Base):
    """Serper JSON API."""

    base_url: str = "https://google.serper.dev/search"
    api_key: str = ""
    count: int = Field(default=10, ge=1, le=100)


class SearchProvidersConfig(Base):
    google: GoogleProviderConfig = Field(default_factory=GoogleProviderConfig)
    ddg: DuckDuckGoProviderConfig = Field(default_factory=DuckDuckGoProviderConfig)
    serper: SerperProviderConfig = Field(default_factory=SerperProviderConfig)


class SearchConfig(Base):
    """Outbound request and retry settings shared by all providers."""

    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "en-US,en;q=0.9"
    timeout_seconds: float = Field(default=10.0, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=0.5, ge=0)
    retry_backoff: float = Field(default=2.0, ge=1)
    retry_jitter: float = Field(default=0.1, ge=0)
    providers: SearchProvidersConfig = Field(default_factory=SearchProvidersConfig)


class ServerConfig(Base):
    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: str = "public"


class Config(BaseSettings):
    """Root configuration for searchbot."""

    search: SearchConfig = Field(default_factory=SearchConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    model_config = SettingsConfigDict(
        env_prefix="SEARCHBOT_",
        env_nested_delimiter="__",
        extra="ignore",
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
        # Environment overrides the config file, which arrives as init kwargs.
        return env_settings, dotenv_settings, init_settings, file_secret_settings
