"""
Configuration management for the MCP Lite engine.

This module implements the AppConfig Pydantic model and configuration loading.

Configuration is loaded from multiple sources with layered precedence:
1. Built-in defaults (Pydantic model defaults)
2. YAML config file (/etc/mcp-lite/config.yml or --config path)
3. Environment variables (MCP_LITE_* prefix, __ for nesting)
4. Command-line arguments (highest precedence)
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("/etc/mcp-lite/config.yml")

# =============================================================================
# Server Configuration
# =============================================================================


class ServerConfig(BaseModel):
    """Server identity and protocol settings.

    Attributes:
        name: Server name reported in initialize.serverInfo.
        version: Server version reported in initialize.serverInfo.
        protocol_version: MCP protocol revision reported by initialize.
        log_level: Initial application log level.
    """

    name: str = Field(
        default="MCP Lite Server",
        description="Server name reported to clients",
    )
    version: str = Field(
        default="1.0.0",
        description="Server version reported to clients",
    )
    protocol_version: str = Field(
        default="2025-06-18",
        description="MCP protocol version reported by initialize",
    )
    log_level: str = Field(
        default="info",
        description="Log level: debug, info, warn, error",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"debug", "info", "warn", "warning", "error", "critical"}
        v_lower = v.lower()
        if v_lower not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        # Normalize 'warn' to 'warning'
        if v_lower == "warn":
            return "warning"
        return v_lower


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level.
        json_format: Emit one JSON object per log record.
        stream: Output stream, "stderr" or "stdout".
        debug_mode: Enable extra diagnostic logging.
    """

    level: str = Field(
        default="info",
        description="Log level",
    )
    json_format: bool = Field(
        default=True,
        description="Whether to format log records as JSON",
    )
    stream: str = Field(
        default="stderr",
        description="Log stream: 'stderr' or 'stdout' (stdout carries protocol traffic in stdio mode)",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable extra diagnostic logging",
    )

    @field_validator("stream")
    @classmethod
    def validate_stream(cls, v: str) -> str:
        """Validate log stream name."""
        valid_streams = {"stderr", "stdout"}
        v_lower = v.lower()
        if v_lower not in valid_streams:
            raise ValueError(
                f"Invalid log stream: {v}. Must be one of: {', '.join(sorted(valid_streams))}"
            )
        return v_lower


# =============================================================================
# Tools Configuration
# =============================================================================


class ToolsConfig(BaseModel):
    """Tool and resource behaviour configuration.

    Attributes:
        validate_arguments: Validate tools/call arguments against inputSchema.
        strict_schema: Reject argument keys the schema does not list.
        builtin_fallbacks: Serve the built-in system tool/resource.
        enable_demo: Register the example echo tool and resource.
    """

    validate_arguments: bool = Field(
        default=True,
        description="Validate tools/call arguments against the tool's inputSchema",
    )
    strict_schema: bool = Field(
        default=False,
        description="Report argument keys missing from the schema as unknown properties",
    )
    builtin_fallbacks: bool = Field(
        default=True,
        description="Serve the built-in system info tool and system status resource",
    )
    enable_demo: bool = Field(
        default=False,
        description="Register the example echo tool and echo resource",
    )


# =============================================================================
# Main Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """
    Main application configuration model.

    Built from multiple layers following the precedence rules:
    1. Built-in defaults (defined in this model)
    2. YAML config file
    3. Environment variables (MCP_LITE_* prefix)
    4. Command-line arguments

    Attributes:
        server: Server settings.
        logging: Logging configuration.
        tools: Tool and resource behaviour.
    """

    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Server settings",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    tools: ToolsConfig = Field(
        default_factory=ToolsConfig,
        description="Tool and resource configuration",
    )


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: The base dictionary.
        override: The dictionary with values to override.

    Returns:
        A new dictionary with merged values.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary with configuration values.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _load_env_config(prefix: str = "MCP_LITE_") -> dict[str, Any]:
    """
    Load configuration from environment variables.

    Values are kept as strings and coerced by the config models.
    Environment variables are read with the following rules:
    - Prefix: MCP_LITE_ (configurable)
    - Nested keys: Double underscore (__) separator
    - Example: MCP_LITE_TOOLS__VALIDATE_ARGUMENTS=false

    Args:
        prefix: Environment variable prefix.

    Returns:
        Dictionary with configuration values.
    """
    result: dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        config_key = key[len(prefix) :].lower()
        parts = config_key.split("__")

        current = result
        for part in parts[:-1]:
            current = current.setdefault(part, {})

        current[parts[-1]] = value

    return result


def build_arg_parser() -> argparse.ArgumentParser:
    """Create the command-line parser shared by load_config and the CLI."""
    parser = argparse.ArgumentParser(
        prog="mcp-lite",
        description="MCP Lite Server (JSON-RPC 2.0 over stdio)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        help="Override log level",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Register the example echo tool and resource",
    )

    return parser


def _parse_cli_args(args: list[str] | None = None) -> dict[str, Any]:
    """
    Parse command-line arguments.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Dictionary with parsed arguments.
    """
    parsed = build_arg_parser().parse_args(args)

    result: dict[str, Any] = {}

    if parsed.config:
        result["_config_path"] = parsed.config

    if parsed.log_level:
        result["server"] = {"log_level": parsed.log_level}
        result["logging"] = {"level": parsed.log_level}

    if parsed.debug:
        result.setdefault("logging", {})
        result["logging"]["debug_mode"] = True
        result["logging"]["level"] = "debug"
        result.setdefault("server", {})
        result["server"]["log_level"] = "debug"

    if parsed.demo:
        result["tools"] = {"enable_demo": True}

    return result


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = "MCP_LITE_",
    cli_args: list[str] | None = None,
) -> AppConfig:
    """
    Load configuration from all sources with layered precedence.

    Configuration is loaded from multiple sources in order:
    1. Built-in defaults (from AppConfig model)
    2. YAML config file (if specified or default exists)
    3. Environment variables (MCP_LITE_* prefix)
    4. Command-line arguments

    Later sources override earlier ones.

    Args:
        config_path: Path to YAML configuration file. If None, uses default
            path or CLI --config argument.
        env_prefix: Prefix for environment variables.
        cli_args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Fully configured AppConfig instance.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValidationError: If configuration is invalid.

    Example:
        >>> config = load_config(cli_args=[])
        >>> config.server.protocol_version
        '2025-06-18'
    """
    config_dict: dict[str, Any] = {}

    # Parse CLI args first to get config path
    cli_config = _parse_cli_args(cli_args)
    cli_config_path = cli_config.pop("_config_path", None)

    if config_path is None:
        if cli_config_path is not None:
            config_path = Path(cli_config_path)
        elif DEFAULT_CONFIG_PATH.exists():
            config_path = DEFAULT_CONFIG_PATH
    elif isinstance(config_path, str):
        config_path = Path(config_path)

    if config_path is not None:
        yaml_config = _load_yaml_config(config_path)
        config_dict = _deep_merge(config_dict, yaml_config)

    env_config = _load_env_config(env_prefix)
    config_dict = _deep_merge(config_dict, env_config)

    config_dict = _deep_merge(config_dict, cli_config)

    return AppConfig(**config_dict)
