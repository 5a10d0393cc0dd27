"""Configuration loader for chainmeta tooling using Pydantic settings."""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

ENV_VAR_NAME = "CHAINMETA_ENV"
DEFAULT_ENV = "local"
PROJECT_ROOT = Path(__file__).resolve().parents[3]
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "settings.default.toml"
LOCAL_CONFIG_FILE = CONFIG_DIR / "settings.local.toml"
SETTINGS_FILE_ENV_VAR = "CHAINMETA_SETTINGS_FILE"

ChainName = Literal["mainnet", "bepolia"]
VALID_CHAIN_NAMES: tuple[str, ...] = ("mainnet", "bepolia")


def _resolve_env(explicit_env: str | None = None) -> str:
    """Return the active environment name.

    Args:
        explicit_env: Environment value supplied directly by the caller.

    Returns:
        A stripped environment name, falling back to ``DEFAULT_ENV``.
    """

    env = explicit_env or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV
    return env.strip()


def _env_file_candidates(env: str) -> list[Path]:
    """List candidate ``.env`` files used during settings resolution.

    Args:
        env: Active environment name (for example, ``local`` or ``ci``).

    Returns:
        Ordered list of paths that should be considered when loading
        environment variables from disk.
    """

    return [
        PROJECT_ROOT / ".env",
        PROJECT_ROOT / f".env.{env}",
        PROJECT_ROOT / ".env.local",
    ]


def _resolve_config_path(raw_path: str | None) -> Path | None:
    """Return an absolute config path from user input."""

    if not raw_path:
        return None
    candidate = Path(raw_path).expanduser()
    if not candidate.is_absolute():
        candidate = (PROJECT_ROOT / candidate).resolve()
    return candidate


def _config_file_priority(include_missing: bool = False) -> tuple[Path, ...]:
    """Return config files in descending precedence order."""

    ordered: list[Path] = []
    env_override = _resolve_config_path(os.getenv(SETTINGS_FILE_ENV_VAR))
    if env_override:
        ordered.append(env_override)
    ordered.append(LOCAL_CONFIG_FILE)
    ordered.append(DEFAULT_CONFIG_FILE)
    if include_missing:
        return tuple(ordered)
    return tuple(path for path in ordered if path.exists())


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Pydantic settings source that loads values from a TOML file."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path) -> None:
        super().__init__(settings_cls)
        self.path = path
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data
        if not self.path.exists():
            self._data = {}
            return self._data
        try:
            with self.path.open("rb") as handle:
                self._data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:  # pragma: no cover - invalid files surface immediately
            raise ValueError(f"Invalid TOML syntax in {self.path}") from exc
        return self._data

    def __call__(self) -> dict[str, Any]:  # pragma: no cover - trivial wrapper
        return self._load()

    def get_field_value(self, field_name: str, field):  # pragma: no cover - passthrough helper
        data = self._load()
        return data.get(field_name), field_name in data


class RuntimeSettings(BaseSettings):
    """Process-level runtime controls."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "RUNTIME__LOG_LEVEL"),
    )


class PathSettings(BaseSettings):
    """Locations of the metadata lists, schemas and image assets."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    metadata_dir: Path = Field(
        default=PROJECT_ROOT / "metadata",
        validation_alias=AliasChoices("METADATA_DIR", "PATHS__METADATA_DIR"),
    )
    assets_dir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("ASSETS_DIR", "PATHS__ASSETS_DIR"),
    )
    schema_dir: Path = Field(
        default=PACKAGE_ROOT / "schemas",
        validation_alias=AliasChoices("SCHEMA_DIR", "PATHS__SCHEMA_DIR"),
    )
    generated_images_dir: Path = Field(
        default=PROJECT_ROOT / "generated-vault-images",
        validation_alias=AliasChoices("GENERATED_IMAGES_DIR", "PATHS__GENERATED_IMAGES_DIR"),
    )


class ChainSettings(BaseSettings):
    """JSON-RPC endpoints used for read-only contract calls."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    mainnet_rpc_url: str = Field(
        default="https://rpc.berachain.com/",
        validation_alias=AliasChoices("MAINNET_RPC_URL", "CHAINS__MAINNET_RPC_URL"),
    )
    bepolia_rpc_url: str = Field(
        default="https://bepolia.rpc.berachain.com/",
        validation_alias=AliasChoices("BEPOLIA_RPC_URL", "CHAINS__BEPOLIA_RPC_URL"),
    )
    request_timeout_seconds: float = Field(
        default=20.0,
        validation_alias=AliasChoices("RPC_TIMEOUT_SECONDS", "CHAINS__REQUEST_TIMEOUT_SECONDS"),
    )

    def rpc_url(self, chain: str) -> str:
        """Return the RPC endpoint configured for ``chain``."""

        if chain == "mainnet":
            return self.mainnet_rpc_url
        if chain == "bepolia":
            return self.bepolia_rpc_url
        raise ValueError(f"Unknown chain {chain!r}; expected one of {', '.join(VALID_CHAIN_NAMES)}")


class HubAPISettings(BaseSettings):
    """Authenticated hub API used by the missing-metadata check."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    base_url: str = Field(
        default="https://hub.berachain-staging.com/api-internal",
        validation_alias=AliasChoices("HUB_API_URL", "HUB__BASE_URL"),
    )
    token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HUB_API_TOKEN", "BERACHAIN_HUB_API_TOKEN", "HUB__TOKEN"),
    )
    timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices("HUB_API_TIMEOUT_SECONDS", "HUB__TIMEOUT_SECONDS"),
    )


class VaultsAPISettings(BaseSettings):
    """GraphQL vault listing used by the reconciliation tooling."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    graphql_url: str = Field(
        default="https://api.berachain.com/",
        validation_alias=AliasChoices("VAULTS_API_URL", "VAULTS_API__GRAPHQL_URL"),
    )
    page_size: int = Field(
        default=100,
        validation_alias=AliasChoices("VAULTS_API_PAGE_SIZE", "VAULTS_API__PAGE_SIZE"),
    )
    max_retries: int = Field(
        default=3,
        validation_alias=AliasChoices("VAULTS_API_MAX_RETRIES", "VAULTS_API__MAX_RETRIES"),
    )
    page_delay_seconds: float = Field(
        default=0.2,
        validation_alias=AliasChoices("VAULTS_API_PAGE_DELAY_SECONDS", "VAULTS_API__PAGE_DELAY_SECONDS"),
    )
    timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices("VAULTS_API_TIMEOUT_SECONDS", "VAULTS_API__TIMEOUT_SECONDS"),
    )


class ImageHostSettings(BaseSettings):
    """Cloudinary credentials for hosted vault icons."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    cloud_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CLOUDINARY_CLOUD_NAME", "IMAGE_HOST__CLOUD_NAME"),
    )
    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CLOUDINARY_API_KEY", "IMAGE_HOST__API_KEY"),
    )
    api_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CLOUDINARY_API_SECRET", "IMAGE_HOST__API_SECRET"),
    )
    folder: str = Field(
        default="vaults",
        validation_alias=AliasChoices("CLOUDINARY_FOLDER", "IMAGE_HOST__FOLDER"),
    )

    @property
    def is_configured(self) -> bool:
        """bool: True when every credential needed for uploads is present."""

        return bool(self.cloud_name and self.api_key and self.api_secret)


class ObservabilitySettings(BaseSettings):
    """Structured logging and metrics sinks."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    structured_logging: bool = Field(
        default=False,
        validation_alias=AliasChoices("STRUCTURED_LOGGING", "OBSERVABILITY__STRUCTURED_LOGGING"),
    )
    statsd_host: str | None = Field(
        default=None,
        validation_alias=AliasChoices("STATSD_HOST", "OBSERVABILITY__STATSD_HOST"),
    )
    statsd_port: int = Field(
        default=8125,
        validation_alias=AliasChoices("STATSD_PORT", "OBSERVABILITY__STATSD_PORT"),
    )
    statsd_prefix: str = Field(
        default="chainmeta",
        validation_alias=AliasChoices("STATSD_PREFIX", "OBSERVABILITY__STATSD_PREFIX"),
    )


class Settings(BaseSettings):
    """Top-level configuration model with nested sections for each tool."""

    env: str = Field(
        default_factory=lambda: _resolve_env(),
        validation_alias=AliasChoices("ENV", "ENVIRONMENT", "RUNTIME__ENV"),
    )
    project_root: Path = Field(default=PROJECT_ROOT)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    chains: ChainSettings = Field(default_factory=ChainSettings)
    hub: HubAPISettings = Field(default_factory=HubAPISettings)
    vaults_api: VaultsAPISettings = Field(default_factory=VaultsAPISettings)
    image_host: ImageHostSettings = Field(default_factory=ImageHostSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    env_files: tuple[Path, ...] = Field(default_factory=tuple, exclude=True)
    config_files: tuple[Path, ...] = Field(default_factory=tuple, exclude=True)

    model_config = SettingsConfigDict(
        env_prefix="CHAINMETA_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Extend settings sources with TOML-based config files."""

        config_sources = [TomlConfigSettingsSource(settings_cls, path) for path in _config_file_priority()]
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            *config_sources,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize relative paths once the model is initialised."""

        paths = self.paths
        updates: dict[str, Path] = {}
        for name in ("metadata_dir", "schema_dir", "generated_images_dir"):
            value = getattr(paths, name)
            if not value.is_absolute():
                updates[name] = (self.project_root / value).resolve()
        metadata_dir = updates.get("metadata_dir", paths.metadata_dir)
        if paths.assets_dir is None:
            updates["assets_dir"] = metadata_dir / "assets"
        elif not paths.assets_dir.is_absolute():
            updates["assets_dir"] = (self.project_root / paths.assets_dir).resolve()
        if updates:
            object.__setattr__(self, "paths", paths.model_copy(update=updates))
        return self

    @property
    def log_level(self) -> str:
        """str: Effective logging level for the running process."""

        return self.runtime.log_level

    @property
    def metadata_dir(self) -> Path:
        """Path: Root directory holding ``tokens/``, ``vaults/`` and ``validators/``."""

        return self.paths.metadata_dir

    @property
    def assets_dir(self) -> Path:
        """Path: Root of the ``tokens/`` and ``vaults/`` image asset tree."""

        assert self.paths.assets_dir is not None  # resolved in _resolve_paths
        return self.paths.assets_dir

    def list_file(self, kind: str, chain: str) -> Path:
        """Return the metadata list path for ``kind`` (tokens/vaults/validators) on ``chain``."""

        return self.metadata_dir / kind / f"{chain}.json"


def _load_settings(env: str | None = None) -> Settings:
    """Load settings with optional environment override.

    Args:
        env: Environment name supplied programmatically.

    Returns:
        Fully parsed :class:`Settings` instance with env files applied.
    """

    resolved_env = _resolve_env(env)
    candidate_files = [path for path in _env_file_candidates(resolved_env) if path.exists()]
    config_files = _config_file_priority()
    return Settings(
        _env_file=[str(path) for path in candidate_files],
        _env_file_encoding="utf-8",
        env=resolved_env,
        env_files=tuple(candidate_files),
        config_files=config_files,
    )


@lru_cache(maxsize=1)
def get_settings(env: str | None = None) -> Settings:
    """Return cached settings for the requested environment."""

    return _load_settings(env)


def reload_settings(env: str | None = None) -> Settings:
    """Clear the cached settings and reload from disk."""

    get_settings.cache_clear()
    return get_settings(env)


__all__ = [
    "ChainName",
    "Settings",
    "VALID_CHAIN_NAMES",
    "get_settings",
    "reload_settings",
    "PROJECT_ROOT",
    "ENV_VAR_NAME",
]
