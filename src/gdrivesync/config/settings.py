from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from gdrivesync.auth import AuthInfo
from gdrivesync.auth.auth_info import DEFAULT_REDIRECT_URI
from gdrivesync.errors import ConfigurationError

CONFIG_DIR = Path.home() / ".gdrivesync"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"


class AuthConfig(BaseModel):
    client_id: str = ""
    client_secret: str = ""
    # Filled in by `authenticate`.
    refresh_token: str = ""
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: list[str] = Field(default_factory=lambda: ["https://www.googleapis.com/auth/drive.file"])


class SyncConfig(BaseModel):
    local_root: str = ""
    # Drive folder id used as the sync root.
    folder_id: str = ""
    # Minutes between scheduled runs; 0 disables the periodic trigger.
    sync_interval: int = Field(default=15, ge=0, le=24 * 60)
    auto_sync: bool = True
    # - overwrite: upload the local version over the remote one
    # - keep-local: leave both sides as they are
    # - keep-remote: download the remote version over the local one
    # - ask: hand the conflict to an interactive arbiter
    conflict_resolution: Literal["overwrite", "keep-local", "keep-remote", "ask"] = "overwrite"
    debounce_sec: float = Field(default=5.0, gt=0)
    # Same-size binaries count as identical without comparing content.
    binary_size_only: bool = True
    exclude_dirs: list[str] = Field(default_factory=lambda: [".git", ".trash", "__pycache__"])
    exclude_hidden_files: bool = False


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: str = str(CONFIG_DIR / "gdrivesync.log")


class AppConfig(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    state_file: str = str(CONFIG_DIR / "state.json")


def auth_info_from_config(cfg: AppConfig) -> AuthInfo:
    """Build AuthInfo from settings; missing client credentials are a config error."""
    if not cfg.auth.client_id.strip() or not cfg.auth.client_secret.strip():
        raise ConfigurationError("Please set Client ID and Client Secret in settings")
    return AuthInfo(
        client_id=cfg.auth.client_id.strip(),
        client_secret=cfg.auth.client_secret.strip(),
        refresh_token=cfg.auth.refresh_token.strip() or None,
        redirect_uri=cfg.auth.redirect_uri,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load settings; a missing file is created with defaults."""
    if not path.exists():
        cfg = AppConfig()
        save_config(cfg, path)
        return cfg

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return AppConfig.model_validate(data)
    except (yaml.YAMLError, ValidationError) as exc:
        raise ConfigurationError("Invalid configuration file", details={"path": str(path)}, cause=exc) from exc


def save_config(cfg: AppConfig, path: Path = DEFAULT_CONFIG_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(cfg.model_dump(), allow_unicode=True, sort_keys=False), encoding="utf-8")
