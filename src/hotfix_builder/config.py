"""Configuration management for Hotfix Builder."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".hotfix-builder"


class RepositoryConfig(BaseModel):
    """Identity of the GitHub repository the hotfix is built in."""

    owner: str = Field(..., description="Repository owner login (user or organization)")
    name: str = Field(..., description="Repository name")

    @field_validator("owner", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject empty owner or repository names."""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class GitHubConfig(BaseModel):
    """Configuration for the GitHub REST API and the gh CLI.

    The token is read from ``token_env_var`` first and from
    ``gh config get oauth_token`` second.
    """

    api_url: str = Field(
        default="https://api.github.com", description="GitHub REST API base URL"
    )
    host: str = Field(
        default="github.com", description="GitHub host used for gh CLI lookups"
    )
    token_env_var: str = Field(
        default="GITHUB_TOKEN", description="Environment variable holding the API token"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    per_page: int = Field(
        default=100, ge=1, le=100, description="Page size for list endpoints (max 100)"
    )

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class GitConfig(BaseModel):
    """Configuration for git invocations during replay."""

    remote: str = Field(default="origin", description="Remote the hotfix branch is pushed to")
    timeout: Optional[float] = Field(
        default=None, description="Timeout in seconds for each git command (None = no limit)"
    )


class Config(BaseModel):
    """Main configuration for Hotfix Builder."""

    main_branch: str = Field(
        default="master", description="Branch the pull requests were merged into"
    )
    repository: Optional[RepositoryConfig] = Field(
        default=None,
        description="Repository identity; resolved with 'gh repo view' when unset",
    )
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    git: GitConfig = Field(default_factory=GitConfig)


class ConfigManager:
    """Manages configuration loading and saving."""

    DEFAULT_CONFIG_PATH = Path(CONFIG_DIR_NAME) / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                self._config = Config(**data)
            except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
                raise ConfigurationError(
                    f"Failed to load config from {self.config_path}", details=str(e)
                ) from e
            logger.debug(f"Loaded configuration from {self.config_path}")
        else:
            logger.debug(f"No config at {self.config_path}, using defaults")
            self._config = Config()

        return self._config

    def save(self, config: Optional[Config] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(config.model_dump(mode="json"), f, indent=2)

    def get_config(self) -> Config:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load()
        if self._config is None:
            raise RuntimeError("Failed to load configuration")
        return self._config

    def update_config(self, **kwargs: Any) -> Config:
        """Return a copy of the configuration with top-level values replaced.

        The file on disk is left untouched; CLI overrides are per run.
        """
        config_dict = self.get_config().model_dump()
        config_dict.update({k: v for k, v in kwargs.items() if v is not None})
        self._config = Config(**config_dict)
        return self._config

    @staticmethod
    def find_config_path(start_dir: Optional[Path] = None) -> Optional[Path]:
        """Find .hotfix-builder/config.json by walking up the directory tree.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Path to config.json if found, None otherwise
        """
        current = start_dir or Path.cwd()
        for path in [current] + list(current.parents):
            config_path = path / CONFIG_DIR_NAME / "config.json"
            if config_path.exists():
                return config_path
        return None

    @classmethod
    def create_with_backtrack(cls, start_dir: Optional[Path] = None) -> "ConfigManager":
        """Create ConfigManager by finding config through directory backtracking."""
        config_path = cls.find_config_path(start_dir)
        if config_path is None:
            config_path = (start_dir or Path.cwd()) / CONFIG_DIR_NAME / "config.json"
        return cls(config_path)
