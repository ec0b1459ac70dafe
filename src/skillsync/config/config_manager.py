"""
Configuration management system for skillsync.
"""

import os
import re
import yaml
import logging
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)

VALID_BACKENDS = {"gh", "api"}
VALID_FORKING_STRATEGIES = {"auto", "fixed_url", "none"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Environment variable -> dotted configuration key
ENV_VAR_MAPPING = {
    "GITHUB_TOKEN": "github.access_token",
    "GITHUB_API_URL": "github.api_base_url",
    "SKILLSYNC_BACKEND": "github.backend",
    "SKILLSYNC_UPSTREAM": "repository.upstream",
    "SKILLSYNC_BRANCH": "repository.branch",
    "SKILLSYNC_FORKING_STRATEGY": "repository.forking_strategy",
    "SKILLSYNC_ORIGIN_URL": "repository.origin_url",
    "SKILLSYNC_INSTALL_DIR": "paths.install_dir",
    "SKILLSYNC_BACKUP_ROOT": "paths.backup_root",
    "SKILLSYNC_PRIVATE_PREFIX": "paths.private_prefix",
    "LOG_LEVEL": "logging.level",
    "LOG_FILE": "logging.file",
}

_VAR_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass
class GitHubConfig:
    """Hosting API configuration."""
    backend: str = "gh"  # gh, api
    access_token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    web_base_url: str = "https://github.com"
    timeout: int = 30
    fork_ready_timeout: int = 30  # seconds


@dataclass
class RepositoryConfig:
    """Canonical repository and forking configuration."""
    upstream: str = "r-aas/claude-env"
    branch: str = "main"
    forking_strategy: str = "auto"  # auto, fixed_url, none
    origin_url: Optional[str] = None


@dataclass
class PathsConfig:
    """Filesystem layout of the managed directory."""
    install_dir: str = "~/.claude"
    backup_root: Optional[str] = None  # defaults to the parent of install_dir
    skills_subdir: str = "skills"
    private_prefix: str = "private-"
    entry_scripts: List[str] = field(default_factory=lambda: ["install.sh", "update.sh"])

    @property
    def install_path(self) -> Path:
        return Path(self.install_dir).expanduser()

    @property
    def backup_path(self) -> Path:
        if self.backup_root:
            return Path(self.backup_root).expanduser()
        return self.install_path.parent


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"
    file: Optional[str] = None
    format: str = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """Complete application configuration."""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


SECTION_TYPES = {f.name: f.default_factory for f in fields(AppConfig)}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``base`` updated with ``override``, merging nested mappings."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def expand_references(value: Any) -> Any:
    """
    Replace ``${VAR}`` references inside strings with environment values.
    Unset variables are left as written.
    """
    if isinstance(value, dict):
        return {k: expand_references(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_references(item) for item in value]
    if isinstance(value, str):
        return _VAR_REFERENCE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


def dotted_to_nested(values: Dict[str, Any]) -> Dict[str, Any]:
    """Turn ``{"paths.install_dir": x}`` into ``{"paths": {"install_dir": x}}``."""
    nested: Dict[str, Any] = {}
    for dotted, value in values.items():
        section, _, key = dotted.partition(".")
        nested.setdefault(section, {})[key] = value
    return nested


class ConfigManager:
    """
    Manages application configuration from multiple sources.

    Later sources override earlier ones:
    1. Dataclass defaults
    2. YAML configuration file
    3. Environment variables (see ``ENV_VAR_MAPPING``)
    4. Command-line overrides
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Args:
            config_file: Path to a YAML configuration file; a missing file is ignored
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[AppConfig] = None
        self._overrides: Dict[str, Any] = {}

    def set_overrides(self, overrides: Dict[str, Any]) -> None:
        """
        Register command-line overrides using dotted keys
        (e.g. ``{"logging.level": "DEBUG"}``). Invalidates the cached config.
        """
        self._overrides = dict(overrides)
        self._config = None

    def load_config(self) -> AppConfig:
        """
        Load configuration from all sources.

        Raises:
            ConfigurationError: If a source is unreadable or the merged result is invalid
        """
        if self._config is not None:
            return self._config

        merged = asdict(AppConfig())
        if self.config_file and self.config_file.exists():
            merged = deep_merge(merged, self._read_file(self.config_file))
        merged = deep_merge(merged, self._read_environment())
        merged = deep_merge(merged, dotted_to_nested(self._overrides))
        merged = expand_references(merged)

        self._validate(merged)
        self._config = self._build(merged)
        return self._config

    def _read_file(self, config_path: Path) -> Dict[str, Any]:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Configuration file {config_path} is not valid YAML",
                cause=e,
                remediation=f"Fix the syntax in {config_path}"
            )

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping",
                remediation=f"Fix the structure of {config_path}"
            )

        logger.info(f"Loaded configuration from {config_path}")
        return data

    def _read_environment(self) -> Dict[str, Any]:
        values = {}
        for env_var, dotted in ENV_VAR_MAPPING.items():
            raw = os.environ.get(env_var)
            if raw is not None:
                values[dotted] = self._coerce(dotted, raw)
        return dotted_to_nested(values)

    @staticmethod
    def _coerce(dotted: str, raw: str) -> Any:
        """Convert an environment string to the type of the target field."""
        section, _, key = dotted.partition(".")
        default = getattr(SECTION_TYPES[section](), key)
        if isinstance(default, bool):
            return raw.lower() in ("1", "true", "yes", "on")
        if isinstance(default, int):
            try:
                return int(raw)
            except ValueError:
                raise ConfigurationError(f"{dotted} must be an integer, got {raw!r}", key=dotted)
        return raw

    def _validate(self, config: Dict[str, Any]) -> None:
        """
        Raises:
            ConfigurationError: Naming the offending key
        """
        for section in SECTION_TYPES:
            if not isinstance(config.get(section), dict):
                raise ConfigurationError(f"Section '{section}' must be a mapping", key=section)

        github = config["github"]
        repository = config["repository"]

        if github.get("backend") not in VALID_BACKENDS:
            raise ConfigurationError(
                f"Invalid hosting backend: {github.get('backend')}. Valid backends: {sorted(VALID_BACKENDS)}",
                key="github.backend"
            )

        upstream = str(repository.get("upstream") or "")
        owner, _, name = upstream.partition("/")
        if not owner or not name or "/" in name:
            raise ConfigurationError(
                f"Invalid upstream repository: {upstream!r}. Expected 'owner/name'",
                key="repository.upstream"
            )

        strategy = repository.get("forking_strategy")
        if strategy not in VALID_FORKING_STRATEGIES:
            raise ConfigurationError(
                f"Invalid forking strategy: {strategy}. "
                f"Valid strategies: {sorted(VALID_FORKING_STRATEGIES)}",
                key="repository.forking_strategy"
            )
        if strategy == "fixed_url" and not repository.get("origin_url"):
            raise ConfigurationError(
                "Forking strategy 'fixed_url' requires repository.origin_url",
                key="repository.origin_url",
                remediation="Set SKILLSYNC_ORIGIN_URL or repository.origin_url in the config file"
            )

        if not config["paths"].get("private_prefix"):
            raise ConfigurationError("paths.private_prefix must not be empty", key="paths.private_prefix")

        level = str(config["logging"].get("level")).upper()
        if level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {level}. Valid levels: {sorted(VALID_LOG_LEVELS)}",
                key="logging.level"
            )

        if github["backend"] == "api" and strategy == "auto" and not github.get("access_token"):
            logger.warning("GitHub access token not configured - the api backend cannot fork")

    def _build(self, config: Dict[str, Any]) -> AppConfig:
        sections = {}
        for name, section_type in SECTION_TYPES.items():
            try:
                sections[name] = section_type(**config[name])
            except TypeError as e:
                raise ConfigurationError(f"Unknown setting in section '{name}': {e}", key=name, cause=e)
        return AppConfig(**sections)

    def get_config(self) -> AppConfig:
        """Get the current configuration, loading it on first use."""
        return self.load_config()

    def reload_config(self) -> AppConfig:
        """Drop the cached configuration and load it again."""
        self._config = None
        return self.load_config()

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """
        Return the effective configuration as plain dictionaries.

        Args:
            redact: Mask the access token
        """
        config_dict = asdict(self.get_config())
        if redact and config_dict["github"].get("access_token"):
            config_dict["github"]["access_token"] = "*" * 8
        return config_dict

    def save_config(self, config_path: Optional[Path] = None) -> None:
        """Write the effective configuration as YAML. The access token is never written."""
        config_path = config_path or self.config_file or Path("skillsync.yaml")

        config_dict = self.to_dict(redact=False)
        config_dict["github"].pop("access_token", None)

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {config_path}")


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        config_file: Path to configuration file (only used on first call)
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_file)
    return _config_manager


def reset_config_manager() -> None:
    """Drop the global configuration manager."""
    global _config_manager
    _config_manager = None


def get_config() -> AppConfig:
    """Get the current application configuration."""
    return get_config_manager().get_config()
