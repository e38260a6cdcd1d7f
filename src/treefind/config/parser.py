"""
YAML settings parser for treefind.

Settings files are never discovered implicitly; they are read only when a
path is passed in. This module loads the file, validates it against
WalkerConfig and reports helpful error messages for bad settings.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from ..errors import TreefindError
from ..models.config import WalkerConfig


logger = logging.getLogger(__name__)


@dataclass
class ConfigParseResult:
    """
    Result of configuration parsing operation.

    Attributes:
        config: The parsed and validated configuration
        warnings: List of non-fatal warnings
        config_path: Path to the configuration file used
        is_default: Whether default configuration was used
    """
    config: WalkerConfig
    warnings: List[str]
    config_path: Optional[Path]
    is_default: bool


class ConfigurationError(TreefindError):
    """Raised when configuration parsing or validation fails."""
    pass


class ConfigParser:
    """
    YAML settings parser with validation and error handling.

    Args:
        strict_mode: If True, treat warnings as errors
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse settings from a file, or use defaults when no path is given.

        Args:
            config_path: Path to the settings file

        Returns:
            ConfigParseResult containing parsed configuration and metadata

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        if config_path is None:
            self.logger.debug("No settings file given, using defaults")
            return ConfigParseResult(
                config=WalkerConfig(),
                warnings=[],
                config_path=None,
                is_default=True
            )

        config_path = Path(config_path).expanduser()
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        config_data = self._load_yaml_file(config_path)
        config = self._validate_config_data(config_data, config_path)
        warnings = config.validate_configuration()

        if self.strict_mode and warnings:
            raise ConfigurationError(f"Configuration warnings in strict mode: {'; '.join(warnings)}")

        for warning in warnings:
            self.logger.warning(warning)

        self.logger.info(f"Configuration loaded from {config_path}")

        return ConfigParseResult(
            config=config,
            warnings=warnings,
            config_path=config_path,
            is_default=False
        )

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigurationError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            # Comment-only document
            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigurationError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"Configuration file {file_path} is not valid UTF-8: {e}") from e
        except (OSError, IOError) as e:
            raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    def _validate_config_data(self, config_data: Dict[str, Any], config_path: Path) -> WalkerConfig:
        """
        Validate configuration data and build a WalkerConfig.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        try:
            return WalkerConfig.from_dict(config_data)
        except ValidationError as e:
            problems = []
            for error in e.errors():
                location = '.'.join(str(part) for part in error['loc']) or '(root)'
                problems.append(f"{location}: {error['msg']}")
            raise ConfigurationError(
                f"Configuration validation failed in {config_path}: {'; '.join(problems)}"
            ) from e

    def save_config(self, config: WalkerConfig, output_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Raises:
            ConfigurationError: If file cannot be written
        """
        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self._generate_yaml_with_comments(config.to_dict()))

            self.logger.info(f"Configuration saved to {output_path}")

        except (OSError, IOError) as e:
            raise ConfigurationError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        """
        Generate YAML content with helpful comments.

        Args:
            config_dict: Configuration dictionary

        Returns:
            YAML content with comments
        """
        lines = [
            "# treefind settings",
            "# Command line options override every value in this file",
            "",
        ]

        sections = [
            ("strategy", "Subdirectory scheduling: sequential or fanout"),
            ("max_concurrent", "Sibling directories walked at once in fanout mode"),
            ("output_format", "Match output: text or json"),
            ("log_level", "Diagnostics written to stderr"),
            ("recursive", "Descend into subdirectories unless told otherwise"),
            ("ignore_case", "Compare names case-insensitively unless told otherwise"),
        ]

        for key, comment in sections:
            if key in config_dict:
                lines.append(f"# {comment}")
                lines.append(yaml.dump({key: config_dict[key]}, default_flow_style=False, sort_keys=False).rstrip())
                lines.append("")

        return "\n".join(lines)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a settings file without keeping the result.

        Returns:
            List of validation errors (empty if valid)
        """
        try:
            self.load_config(config_path)
        except ConfigurationError as e:
            return [str(e)]
        return []

    def get_config_template(self) -> str:
        """Get a template settings file with every option and its default."""
        return self._generate_yaml_with_comments(WalkerConfig().to_dict())


def load_config(config_path: Optional[Union[str, Path]] = None, strict_mode: bool = False) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    parser = ConfigParser(strict_mode=strict_mode)
    return parser.load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """Convenience function to validate a configuration file."""
    parser = ConfigParser()
    return parser.validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Create a template configuration file.

    Raises:
        ConfigurationError: If template cannot be created
    """
    parser = ConfigParser()
    template_content = parser.get_config_template()

    try:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template_content)

    except (OSError, IOError) as e:
        raise ConfigurationError(f"Cannot create template file {output_path}: {e}") from e
