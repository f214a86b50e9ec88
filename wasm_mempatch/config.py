"""
Run configuration for the patcher.

Values are resolved with the following precedence (highest first):
    1. Explicit command-line flags
    2. Environment variables (WASM_MEMPATCH_PAGES, WASM_TOOLS)
    3. An optional YAML config file
    4. Built-in defaults
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import structlog
import yaml

from .errors import ConfigError

logger = structlog.get_logger()

# Default configuration
DEFAULT_MEMORY_PAGES = 128
PAGE_SIZE = 65536  # 64KB per page
DEFAULT_WASM_TOOLS = "wasm-tools"

PAGES_ENV_VAR = "WASM_MEMPATCH_PAGES"
WASM_TOOLS_ENV_VAR = "WASM_TOOLS"

_CONFIG_KEYS = {"pages", "wasm_tools"}


@dataclass(frozen=True)
class Configuration:
    """Everything a single patch run needs."""
    input_path: str
    output_path: str
    memory_pages: int = DEFAULT_MEMORY_PAGES
    wasm_tools: str = DEFAULT_WASM_TOOLS

    @property
    def stack_pointer(self) -> int:
        # Stack at the end of allocated memory
        return self.memory_pages * PAGE_SIZE


def _coerce_pages(value: Any, source: str) -> int:
    # bool is an int subclass; `pages: true` in YAML is not a page count
    if isinstance(value, bool):
        raise ConfigError(source, f"pages must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(source, f"pages must be an integer, got {value!r}")


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Load patcher settings from a YAML file.

    The file must contain a mapping. Recognised keys are ``pages`` and
    ``wasm_tools``; anything else is ignored with a warning.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(path, e.strerror or str(e))
    except yaml.YAMLError as e:
        raise ConfigError(path, f"malformed YAML: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be a mapping")

    unknown = sorted(set(data) - _CONFIG_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys", path=path, keys=unknown)

    settings: Dict[str, Any] = {}
    if "pages" in data:
        settings["pages"] = _coerce_pages(data["pages"], path)
    if "wasm_tools" in data:
        settings["wasm_tools"] = str(data["wasm_tools"])
    logger.debug("Loaded config file", path=path, **settings)
    return settings


def resolve_configuration(
    input_path: str,
    output_path: str,
    pages: Optional[int] = None,
    wasm_tools: Optional[str] = None,
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Configuration:
    """
    Merge flags, environment, config file and defaults into a Configuration.

    Page counts are not range-checked; zero or very large values are passed
    through to the assembler as-is.
    """
    if environ is None:
        environ = os.environ

    settings: Dict[str, Any] = {"pages": DEFAULT_MEMORY_PAGES, "wasm_tools": DEFAULT_WASM_TOOLS}
    if config_path:
        settings.update(load_config_file(config_path))

    if environ.get(PAGES_ENV_VAR):
        settings["pages"] = _coerce_pages(environ[PAGES_ENV_VAR], PAGES_ENV_VAR)
    if environ.get(WASM_TOOLS_ENV_VAR):
        settings["wasm_tools"] = environ[WASM_TOOLS_ENV_VAR]

    if pages is not None:
        settings["pages"] = pages
    if wasm_tools is not None:
        settings["wasm_tools"] = wasm_tools

    return Configuration(
        input_path=input_path,
        output_path=output_path,
        memory_pages=settings["pages"],
        wasm_tools=settings["wasm_tools"],
    )
