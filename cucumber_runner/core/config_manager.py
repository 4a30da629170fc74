"""Configuration management"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import dotenv_values, load_dotenv

from cucumber_runner.utils.helpers import deep_get
from cucumber_runner.utils.logger import setup_logger

logger = setup_logger(__name__)

CONFIG_SECTION = 'cucumber_runner'
DEFAULT_FEATURES = ['features/**/*.feature']
DEFAULT_CUCUMBER_PATH = 'node_modules/@cucumber/cucumber/bin/cucumber.js'
TRUE_VALUES = ('true', 'yes', 'on', '1')
FALSE_VALUES = ('false', 'no', 'off', '0', '')


class ConfigError(ValueError):
    """Raised for configuration values of the wrong shape"""


class ConfigManager:
    """Manages configuration loading and merging"""

    def __init__(self, config_path: Union[str, Path], environment: Optional[str] = None):
        self.config_path = Path(config_path)
        self.environment = environment
        self.config: Dict[str, Any] = {}

    def load_config(self) -> Dict[str, Any]:
        """Load and merge configuration files"""
        # Variables from .env next to the config file take part in ${VAR} substitution
        dotenv_path = self.config_path.parent / '.env'
        if dotenv_path.exists():
            load_dotenv(dotenv_path)

        if self.config_path.exists():
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self.config = yaml.safe_load(f) or {}
        else:
            logger.warning(f"Config file not found: {self.config_path}, using defaults")

        if not isinstance(self.config, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")

        if self.environment:
            env_config_path = self.config_path.parent / 'environments' / f'{self.environment}.yaml'
            if env_config_path.exists():
                with open(env_config_path, 'r', encoding='utf-8') as f:
                    env_config = yaml.safe_load(f) or {}

                # Handle overrides section specially
                if 'overrides' in env_config:
                    overrides = env_config.pop('overrides')
                    self._apply_overrides(self.config, overrides)

                self.config = self._merge_configs(self.config, env_config)
            else:
                logger.warning(f"Environment config not found: {env_config_path}")

        self.config = self._process_env_vars(self.config)

        logger.info(f"Configuration loaded for environment: {self.environment or 'default'}")
        return self.config

    def _merge_configs(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_overrides(self, base: Dict, overrides: Dict) -> None:
        """Apply overrides from environment config to base config"""
        for section, values in overrides.items():
            if section in base and isinstance(values, dict) and isinstance(base[section], dict):
                base[section].update(values)
            else:
                base[section] = values

    def _process_env_vars(self, config: Any) -> Any:
        """Replace ${VAR} with environment variables"""
        if isinstance(config, dict):
            return {k: self._process_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [self._process_env_vars(item) for item in config]
        elif isinstance(config, str) and config.startswith('${') and config.endswith('}'):
            var_name = config[2:-1]
            return os.environ.get(var_name, config)
        else:
            return config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)"""
        return deep_get(self.config, key, default)


def _string_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"'{CONFIG_SECTION}.{key}' must be a list, got {type(value).__name__}")
    return [str(item) for item in value]


def _flag(value: Any, key: str) -> bool:
    # ${VAR} substitution leaves strings such as "false"
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigError(f"'{CONFIG_SECTION}.{key}' must be true or false, got {value!r}")


@dataclass
class RunnerConfig:
    """Resolved settings for discovering and running scenarios"""
    features: List[str] = field(default_factory=lambda: list(DEFAULT_FEATURES))
    env_variables: Dict[str, str] = field(default_factory=dict)
    cli_options: List[str] = field(default_factory=list)
    cucumber_path: str = DEFAULT_CUCUMBER_PATH
    node_path: str = 'node'
    cwd: Path = field(default_factory=Path.cwd)
    aggregate_outlines: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any], base_dir: Union[str, Path, None] = None) -> 'RunnerConfig':
        section = deep_get(config, CONFIG_SECTION, {}) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'{CONFIG_SECTION}' must be a mapping")

        base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        cwd = Path(section.get('cwd') or base_dir)
        if not cwd.is_absolute():
            cwd = base_dir / cwd

        env_variables = {}
        env_file = section.get('env_file')
        if env_file:
            env_path = Path(env_file) if Path(env_file).is_absolute() else cwd / env_file
            if env_path.exists():
                env_variables.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
            else:
                logger.warning(f"env_file not found: {env_path}")

        configured_env = section.get('env_variables') or {}
        if not isinstance(configured_env, dict):
            raise ConfigError(f"'{CONFIG_SECTION}.env_variables' must be a mapping")
        env_variables.update({str(k): str(v) for k, v in configured_env.items()})

        return cls(
            features=_string_list(section.get('features'), 'features') or list(DEFAULT_FEATURES),
            env_variables=env_variables,
            cli_options=_string_list(section.get('cli_options'), 'cli_options'),
            cucumber_path=str(section.get('cucumber_path') or DEFAULT_CUCUMBER_PATH),
            node_path=str(section.get('node_path') or 'node'),
            cwd=cwd,
            aggregate_outlines=_flag(section.get('aggregate_outlines'), 'aggregate_outlines'),
        )
