"""Settings resolution with a 4-step profile precedence chain."""

import os
from collections.abc import Mapping
from pathlib import Path

import tomlkit
import typer
from pydantic import SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "jact" / "config.toml"

# Shipped as the example value in the setup wizard; treated as unset.
PLACEHOLDER_BASE_URL = "https://yourcompany.atlassian.net/browse/"


class JactSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="JACT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None

    # Jira: browse URL including trailing slash, e.g. https://jira.example.com/browse/
    jira_base_url: str | None = None
    jira_token: SecretStr | None = None

    # Bitbucket Server HTTP access token
    bitbucket_token: SecretStr | None = None

    @property
    def jira_configured(self) -> bool:
        return bool(self.jira_base_url and self.jira_base_url.strip()) and self.jira_base_url != PLACEHOLDER_BASE_URL

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # init kwargs carry the TOML profile, which env vars and .env override
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def secret_value(secret: SecretStr | None) -> str | None:
    """Unwrap a token, mapping blank values to None."""
    if secret is None:
        return None
    value = secret.get_secret_value().strip()
    return value or None


def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/jact/config.toml, returning empty document if missing.

    Re-read on every call so each command sees the current settings.
    """
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    with CONFIG_PATH.open() as fh:
        return tomlkit.load(fh)


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> JactSettings:
    """Resolve the active profile and return a settings snapshot.

    Precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. JACT_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/jact/config.toml
    4. First profile defined in ~/.config/jact/config.toml

    Missing credentials are not an error here: each feature reports itself
    unavailable when the values it needs are absent.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("JACT_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        elif active not in toml_config:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    # env vars + .env always override profile defaults
    return JactSettings(**profile_defaults)
