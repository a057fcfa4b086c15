"""Settings for talking to the Git hosting API.

The access token and API base URL are looked up in this order:

1. explicit arguments to ``load_settings``
2. environment variables (``GITOPS_TOKEN`` / ``GITHUB_TOKEN``, ``GITOPS_API_BASE``)
3. the named configuration in ``~/.gitopsrc.json``
4. a token file in the home directory (``~/.git-token`` unless configured)
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gitops.errors import MissingToken

logger = logging.getLogger(__name__)

MODULE_NAME = "gitops"
MODULE_VERSION = "0.1.0"
DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_TOKEN_FILE = ".git-token"
CONFIG_FILE_NAME = f".{os.getenv('MODULE_NAME', MODULE_NAME)}rc.json"


class ModuleConf(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Relative to the user's home directory
    git_token_file_path: Optional[str] = Field(default=None, alias="gitTokenFilePath")
    git_api_base: Optional[str] = Field(default=None, alias="gitApiBase")


@dataclass(frozen=True)
class Settings:
    token: str
    api_base: str = DEFAULT_API_BASE
    user_agent: str = f"{MODULE_NAME} {MODULE_VERSION}"
    verify_ssl: bool = True
    # None disables the httpx timeout; a stuck call then blocks its operation
    timeout: Optional[float] = None

    def __repr__(self) -> str:
        return f"Settings(api_base={self.api_base!r}, user_agent={self.user_agent!r}, token=***)"


def _env_flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    try:
        return float(value) if value else None
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}, not a number")
        return None


def config_file_path(home: Optional[Path] = None) -> Path:
    return (home or Path.home()) / CONFIG_FILE_NAME


def read_configuration_list(home: Optional[Path] = None) -> Dict[str, ModuleConf]:
    """Reads every named configuration from the rc file.

    A missing, unreadable or empty file is not an error: a warning is logged
    and no configurations are returned.
    """
    path = config_file_path(home)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not raw:
            raise ValueError(f"{path} was found but no configuration values are defined in it")
        return {name: ModuleConf.model_validate(conf) for name, conf in raw.items()}
    except (OSError, ValueError, AttributeError, ValidationError) as e:
        logger.warning(f"No usable configuration file {path}: {e}")
        return {}


def read_configuration(config_name: str = "default", home: Optional[Path] = None) -> ModuleConf:
    configurations = read_configuration_list(home)
    config = configurations.get(config_name)
    if config is None:
        if configurations:
            logger.warning(f'No configuration named "{config_name}" in {config_file_path(home)}')
        return ModuleConf()
    return config


def read_token_file(path: Path) -> Optional[str]:
    try:
        token = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug(f"Cannot read token file {path}: {e}")
        return None
    return token.replace("\r", "").replace("\n", "").strip() or None


def load_settings(
    github_token: Optional[str] = None,
    token_file_path: Optional[str] = None,
    config_name: str = "default",
    home: Optional[Path] = None,
    api_base: Optional[str] = None,
) -> Settings:
    home = home or Path.home()
    conf = read_configuration(config_name, home)

    api_base = api_base or os.getenv("GITOPS_API_BASE") or conf.git_api_base or DEFAULT_API_BASE
    token_file = home / (token_file_path or conf.git_token_file_path or DEFAULT_TOKEN_FILE)

    token = (
        github_token
        or os.getenv("GITOPS_TOKEN")
        or os.getenv("GITHUB_TOKEN")
        or read_token_file(token_file)
    )
    if token:
        token = token.strip()
    if not token:
        raise MissingToken(
            "A personal access token is required. Pass one explicitly, set GITOPS_TOKEN, "
            f"or create {token_file} containing the token."
        )

    return Settings(
        token=token,
        api_base=api_base.rstrip("/"),
        verify_ssl=_env_flag("GITOPS_VERIFY_SSL"),
        timeout=_env_float("GITOPS_TIMEOUT"),
    )
