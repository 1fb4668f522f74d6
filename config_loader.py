"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict
from urllib.parse import urlparse

import yaml

from models import BlockType

SOURCE_MODES = ('api', 'json')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
BLOCK_TYPES = frozenset(block_type.value for block_type in BlockType)


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        return cls._substitute_env_vars_recursive(config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        mode = get_nested(config, 'source.mode', 'api')
        if mode not in SOURCE_MODES:
            raise ValueError("source.mode must be 'api' or 'json'")

        if mode == 'api':
            cls._validate_required_field(config, 'notion.api_token')
            base_url = get_nested(config, 'notion.base_url')
            if base_url:
                cls._validate_url(base_url, 'notion.base_url')
            if not get_nested(config, 'source.page_ids'):
                raise ValueError("source.page_ids must list at least one page in api mode")
        else:
            json_paths = get_nested(config, 'source.json_paths')
            if not json_paths:
                raise ValueError("source.json_paths must list at least one file in json mode")

        timeout = get_nested(config, 'notion.timeout', 30)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError("notion.timeout must be a positive number")

        max_retries = get_nested(config, 'notion.max_retries', 3)
        if not isinstance(max_retries, int) or max_retries < 0:
            raise ValueError("notion.max_retries must be a non-negative integer")

        threshold = get_nested(config, 'export.more_threshold', 60)
        if not isinstance(threshold, int) or isinstance(threshold, bool) or threshold < 0:
            raise ValueError("export.more_threshold must be a non-negative integer")

        output_dir = get_nested(config, 'export.output_directory')
        if output_dir and os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        templates_dir = get_nested(config, 'export.templates_dir')
        if templates_dir and not os.path.isdir(templates_dir):
            raise ValueError(f"export.templates_dir '{templates_dir}' is not a valid directory")

        enabled = get_nested(config, 'export.extended_syntax.enabled', False)
        if not isinstance(enabled, bool):
            raise ValueError("export.extended_syntax.enabled must be a boolean")

        blocks = get_nested(config, 'export.extended_syntax.blocks')
        if blocks is not None:
            if not isinstance(blocks, list):
                raise ValueError("export.extended_syntax.blocks must be a list of block types")
            unknown = [name for name in blocks if name not in BLOCK_TYPES]
            if unknown:
                raise ValueError(f"export.extended_syntax.blocks has unknown block types: {unknown}")

        level = get_nested(config, 'logging.level')
        if level and str(level).upper() not in LOG_LEVELS:
            raise ValueError(f"logging.level must be one of: {list(LOG_LEVELS)}")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        for section in ('notion', 'source', 'export', 'logging'):
            if not isinstance(merged.get(section), dict):
                merged[section] = {}

        if getattr(args, 'mode', None):
            merged['source']['mode'] = args.mode

        if getattr(args, 'page_id', None):
            merged['source']['page_ids'] = list(args.page_id)

        if getattr(args, 'input', None):
            merged['source']['json_paths'] = list(args.input)
            if not getattr(args, 'mode', None):
                merged['source']['mode'] = 'json'

        if getattr(args, 'output_dir', None):
            merged['export']['output_directory'] = args.output_dir

        if getattr(args, 'extended_syntax', None):
            extended = merged['export'].get('extended_syntax')
            extended = dict(extended) if isinstance(extended, dict) else {}
            extended.update({'enabled': True, 'target': args.extended_syntax})
            merged['export']['extended_syntax'] = extended

        if getattr(args, 'no_download', False):
            merged['export']['download_media'] = False

        if getattr(args, 'dry_run', False):
            merged['export']['dry_run'] = True

        verbose = getattr(args, 'verbose', 0) or 0
        if verbose >= 2:
            merged['logging']['level'] = 'DEBUG'
        elif verbose == 1:
            merged['logging']['level'] = 'INFO'

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )

    @staticmethod
    def _validate_url(url: str, field_name: str) -> None:
        """Validate URL format."""
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(f"{field_name} must use http or https scheme: {url}")
        if not parsed.netloc:
            raise ValueError(f"{field_name} missing hostname: {url}")


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "notion.api_token")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    value = config

    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'get_nested', 'SOURCE_MODES']
