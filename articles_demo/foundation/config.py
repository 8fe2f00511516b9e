"""Configuration for the demo: connection parameters and the document to insert."""

import copy
import os
import yaml
from typing import Dict, List, Optional, Any
from pathlib import Path
import logging
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, ValidationError

from .types import LogLevel, ConfigValidationError


_LOREM_PARAGRAPHS = [
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Duis tristique eros quam, et porttitor dui "
    "fringilla eu. Aenean eget dapibus magna. Vestibulum ante ipsum primis in faucibus orci luctus et "
    "ultrices posuere cubilia curae; Pellentesque ornare vulputate blandit. Pellentesque habitant morbi "
    "tristique senectus et netus et malesuada fames ac turpis egestas. Vestibulum in quam finibus, suscipit "
    "felis a, imperdiet risus. Proin quis tellus vel nisl vehicula rhoncus ac at tortor. Donec imperdiet "
    "vestibulum dolor, vitae porta velit mattis quis. Mauris libero augue, placerat et diam pharetra, ornare "
    "auctor lectus.",
    "Praesent metus turpis, dignissim eget sollicitudin non, ullamcorper in nunc. Nunc et aliquet mi. Cras "
    "convallis pulvinar suscipit. Praesent tristique, massa vel fringilla consectetur, mauris massa "
    "pellentesque nibh, ac maximus sem velit convallis felis. Nunc nisl ligula, faucibus et nunc in, "
    "porttitor rutrum sem. Proin condimentum lacus sed posuere imperdiet. Duis tempus ut libero id pulvinar.",
    "Praesent lorem dolor, ornare a sollicitudin at, porttitor at lacus. Ut ultricies orci a odio ullamcorper "
    "egestas sed nec ex. Proin venenatis semper eleifend. Nullam congue mi ante, eleifend porta ante consequat "
    "et. Etiam felis diam, interdum id malesuada congue, porta ut felis. Integer porttitor at urna vel "
    "gravida. Praesent lobortis egestas vehicula. Donec sit amet pulvinar elit, eget tempor nisi. In hac "
    "habitasse platea dictumst. In auctor hendrerit vulputate. Aenean eu ornare quam, ut semper massa. Sed ac "
    "cursus augue. Sed pulvinar ante a mi sagittis, non finibus eros tempus. Maecenas condimentum lorem a "
    "orci maximus porttitor. Aenean congue luctus metus, a vulputate enim ornare id. Donec malesuada "
    "tincidunt blandit.",
    "Sed et enim sit amet nulla lobortis aliquam eu sed elit. In ac enim at odio accumsan aliquam sed sodales "
    "massa. Aliquam bibendum et ipsum eleifend molestie. Nullam viverra gravida orci. In nec nisl in lorem "
    "bibendum pulvinar. Nulla viverra ac mi id pharetra. Etiam tortor odio, bibendum a efficitur et, rutrum "
    "et tortor. Nunc condimentum elementum risus eget luctus. Mauris blandit nec arcu ac dignissim. "
    "Vestibulum blandit ligula quis dolor vulputate condimentum. Curabitur lacinia odio sed commodo "
    "scelerisque. Mauris a ex velit.",
    "Pellentesque quis leo quis lectus ultrices aliquam vitae quis augue. Mauris semper convallis tellus, at "
    "iaculis enim rhoncus eget. Ut elementum ante a justo vestibulum malesuada. Nulla magna arcu, aliquet at "
    "semper at, lobortis in mi. Proin pharetra leo ac nunc elementum, a congue est pharetra. Donec eget velit "
    "sed magna faucibus viverra at vel lacus. Nunc nulla risus, tincidunt vitae facilisis ut, molestie quis "
    "felis. Cras pharetra tellus dui, sed finibus eros rhoncus non. Quisque dapibus porttitor lectus, id "
    "hendrerit velit. In erat leo, faucibus ut varius a, semper sed risus. Phasellus tristique iaculis "
    "luctus. Donec quis lacus vel leo lacinia eleifend sodales et nisi. Sed a semper libero.",
]

DEFAULT_ARTICLE: Dict[str, Any] = {
    "label": "Article A",
    "slug": "article-a",
    "description": "The first article",
    "text": "<div>" + "".join(f"<p>{p}</p>" for p in _LOREM_PARAGRAPHS) + "</div>",
    "tags": ["text", "article", "node"],
}


class DatabaseConfig(BaseModel):
    """Where to connect and which collection to use."""
    connection_string: str = Field(default="mongodb://localhost:27017")
    username: Optional[str] = "demo"
    password: Optional[str] = "D3m0"
    database_name: str = Field(default="efc", min_length=1)
    collection_name: str = Field(default="articles", min_length=1)
    server_selection_timeout_ms: int = Field(default=30000, gt=0)

    @field_validator('connection_string')
    @classmethod
    def validate_connection_string(cls, v):
        if not v or not v.startswith(('mongodb://', 'mongodb+srv://')):
            raise ValueError("Valid MongoDB connection string is required")
        return v


class DemoConfig(BaseModel):
    """Everything the demo run needs."""
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    document: Dict[str, Any] = Field(default_factory=lambda: copy.deepcopy(DEFAULT_ARTICLE))

    log_level: LogLevel = LogLevel.INFO
    structured_logging: bool = True
    log_file: Optional[str] = None

    def validate_configuration(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        try:
            DatabaseConfig.model_validate(self.database.model_dump())
        except ValidationError as e:
            issues.extend([f"Database config: {error['msg']}" for error in e.errors()])

        if not self.document:
            issues.append("Document to insert must not be empty")
        elif not all(isinstance(key, str) for key in self.document):
            issues.append("Document keys must be strings")

        return issues


class ConfigManager:
    """Loads DemoConfig from environment variables and YAML files."""

    def __init__(self):
        self.config: Optional[DemoConfig] = None
        self.logger = logging.getLogger(__name__)
        self._env_loaded = False
        self._yaml_loaded = False

    def load_from_env(self, env_file: Optional[str] = None) -> None:
        """Load configuration from environment variables.

        An ``env_file`` is read with python-dotenv first; its values
        override variables already present in the process environment.
        """
        if env_file:
            if not Path(env_file).exists():
                raise FileNotFoundError(f"Env file not found: {env_file}")
            load_dotenv(env_file, override=True)

        try:
            self.config = self._create_config_from_env()
        except (ValidationError, ValueError) as e:
            raise ConfigValidationError("environment", str(e)) from e
        self._env_loaded = True
        self.logger.info("Configuration loaded from environment variables")

    def load_from_yaml(self, yaml_file: str) -> None:
        """Load configuration from a YAML file, merging over any loaded config."""
        yaml_path = Path(yaml_file)
        if not yaml_path.exists():
            raise FileNotFoundError(f"YAML config file not found: {yaml_file}")

        with open(yaml_path, 'r') as f:
            yaml_data = yaml.safe_load(f) or {}

        if not isinstance(yaml_data, dict):
            raise ConfigValidationError("yaml", "Top level of YAML config must be a mapping", yaml_file)

        try:
            if self.config:
                self._merge_yaml_config(yaml_data)
            else:
                self.config = self._create_config_from_yaml(yaml_data)
        except (ValidationError, ValueError) as e:
            raise ConfigValidationError("yaml", str(e), yaml_file) from e

        self._yaml_loaded = True
        self.logger.info(f"Configuration loaded from YAML file: {yaml_file}")

    def validate(self) -> None:
        """Validate the current configuration."""
        if not self.config:
            raise ConfigValidationError("config", "No configuration loaded")

        issues = self.config.validate_configuration()
        if issues:
            raise ConfigValidationError("validation", f"Configuration validation failed: {'; '.join(issues)}")

        self.logger.info("Configuration validation passed")

    def get_config(self) -> DemoConfig:
        if not self.config:
            raise ConfigValidationError("config", "No configuration loaded")
        return self.config

    def _create_config_from_env(self) -> DemoConfig:
        defaults = DatabaseConfig()
        database = DatabaseConfig(
            connection_string=os.getenv('MONGODB_CONNECTION_STRING', defaults.connection_string),
            username=os.getenv('MONGODB_USERNAME', defaults.username),
            password=os.getenv('MONGODB_PASSWORD', defaults.password),
            database_name=os.getenv('DATABASE_NAME', defaults.database_name),
            collection_name=os.getenv('COLLECTION_NAME', defaults.collection_name),
            server_selection_timeout_ms=int(
                os.getenv('MONGODB_TIMEOUT_MS', str(defaults.server_selection_timeout_ms))
            ),
        )

        return DemoConfig(
            database=database,
            log_level=LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper()),
            structured_logging=os.getenv('STRUCTURED_LOGGING', 'true').lower() == 'true',
            log_file=os.getenv('LOG_FILE') or None,
        )

    def _create_config_from_yaml(self, yaml_data: Dict[str, Any]) -> DemoConfig:
        config_data: Dict[str, Any] = {}

        if 'database' in yaml_data:
            config_data['database'] = DatabaseConfig(**(yaml_data['database'] or {}))
        if 'document' in yaml_data:
            config_data['document'] = yaml_data['document']
        if 'logging' in yaml_data:
            config_data.update(self._logging_settings(yaml_data['logging'] or {}))

        return DemoConfig(**config_data)

    def _merge_yaml_config(self, yaml_data: Dict[str, Any]) -> None:
        """Merge YAML values over the current config, keeping unset fields."""
        if 'database' in yaml_data:
            merged = {**self.config.database.model_dump(), **(yaml_data['database'] or {})}
            self.config.database = DatabaseConfig(**merged)

        if 'document' in yaml_data:
            # The document is replaced wholesale; field-level merging would
            # leave stale fields from the default article behind.
            self.config.document = dict(yaml_data['document'] or {})

        if 'logging' in yaml_data:
            for key, value in self._logging_settings(yaml_data['logging'] or {}).items():
                setattr(self.config, key, value)

    @staticmethod
    def _logging_settings(logging_data: Dict[str, Any]) -> Dict[str, Any]:
        settings: Dict[str, Any] = {}
        if 'level' in logging_data:
            settings['log_level'] = LogLevel(str(logging_data['level']).upper())
        if 'structured' in logging_data:
            settings['structured_logging'] = bool(logging_data['structured'])
        if 'file' in logging_data:
            settings['log_file'] = logging_data['file']
        return settings


# Global configuration instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager


def load_config(env_file: Optional[str] = None, yaml_file: Optional[str] = None) -> DemoConfig:
    """Load configuration from the environment and optional files and return it."""
    manager = get_config_manager()

    if env_file or not manager._env_loaded:
        manager.load_from_env(env_file)

    if yaml_file:
        manager.load_from_yaml(yaml_file)

    manager.validate()
    return manager.get_config()
