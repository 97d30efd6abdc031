# SPDX-License-Identifier: Apache-2.0
"""Binding table file loader with version validation."""

from __future__ import annotations

import importlib
import logging
import os
import warnings
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from eventbinder.errors import EventBinderError, SymbolResolutionError
from eventbinder.generator import BindingTable, BindingTableBuilder

from .table import CURRENT_CONFIG_VERSION, MIN_SUPPORTED_VERSION, BindingTableConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ConfigVersionError(EventBinderError, RuntimeError):
    """Error when configuration version is incompatible."""


def resolve_reference(reference: str) -> Any:
    """Import the object named by a ``package.module:QualifiedName`` reference.

    Args:
        reference: Module path and qualified name separated by a colon

    Returns:
        The referenced object

    Raises:
        SymbolResolutionError: If the module or attribute cannot be found
    """
    module_name, sep, qualname = reference.partition(":")
    if not sep or not module_name or not qualname:
        raise SymbolResolutionError(reference, ValueError("expected 'package.module:QualifiedName'"))

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise SymbolResolutionError(reference, e) from e

    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise SymbolResolutionError(reference, e) from e
    return obj


def load_binding_table_config(path: PathLike) -> BindingTableConfig:
    """Load and validate a binding table file with version checking.

    Args:
        path: Path to YAML binding table file

    Returns:
        BindingTableConfig instance

    Raises:
        ConfigVersionError: If config version is missing, too old, or incompatible
        FileNotFoundError: If the YAML file doesn't exist
        ValueError: If the YAML is invalid or contains invalid configuration
    """
    yaml_path = Path(path)
    if not yaml_path.exists():
        raise FileNotFoundError(f"Binding table file not found: {path}")

    try:
        with open(yaml_path, "r") as f:
            yaml_content = f.read()

        # Expand environment variables
        expanded_content = os.path.expandvars(yaml_content)

        cfg_dict = yaml.safe_load(expanded_content)
        if not isinstance(cfg_dict, dict):
            raise ValueError("YAML file must contain a dictionary at the root level")

        normalized_data = _normalize_yaml_keys(cfg_dict)

        ver = _normalize_version(normalized_data.get("config_version"))
        if not ver:
            raise ConfigVersionError(
                "config_version missing. Add `config_version: \"1\"` to your YAML."
            )
        if not ver.isdigit():
            raise ConfigVersionError(
                f"Invalid config_version '{ver}'. Versions are whole numbers such as \"1\"."
            )

        if int(ver) < int(MIN_SUPPORTED_VERSION):
            raise ConfigVersionError(
                f"Config version {ver} is too old. "
                f"Minimum supported is {MIN_SUPPORTED_VERSION}. "
                "Please upgrade your binding table."
            )

        if int(ver) > int(CURRENT_CONFIG_VERSION):
            warnings.warn(
                f"This version understands config_version {CURRENT_CONFIG_VERSION}, "
                f"but file is {ver}. Attempting best-effort parse.",
                UserWarning,
                stacklevel=2,
            )

        normalized_data["config_version"] = ver
        return BindingTableConfig(**normalized_data)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in binding table file: {e}") from e
    except ValidationError as e:
        raise ValueError(f"Invalid binding table in {path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Failed to load binding table from {path}: {e}") from e


def build_binding_table(config: BindingTableConfig) -> BindingTable:
    """Resolve the references of ``config`` and build a validated table.

    Raises:
        SymbolResolutionError: If a referenced class cannot be imported
        HandlerDeclarationError: If a binding violates the binding rules
    """
    target = resolve_reference(config.target)
    if not isinstance(target, type):
        raise SymbolResolutionError(config.target, TypeError("target is not a class"))

    builder = BindingTableBuilder(target, source="file")
    for binding in config.bindings:
        event_types = [resolve_reference(ref) for ref in binding.handles]
        builder.add(binding.method, *event_types)
    return builder.build()


def load_binding_table(path: PathLike) -> BindingTable:
    """Load a binding table file and build the validated table it describes."""
    config = load_binding_table_config(path)
    table = build_binding_table(config)
    logger.info(f"Loaded binding table for {config.target} from {path}")
    return table


def dump_binding_table(table: BindingTable) -> str:
    """Render ``table`` as binding table YAML."""
    data = {"config_version": CURRENT_CONFIG_VERSION, **table.to_dict()}
    return yaml.safe_dump(data, sort_keys=False)


def write_binding_table(table: BindingTable, path: PathLike) -> Path:
    """Write ``table`` to ``path`` as YAML, creating parent directories."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dump_binding_table(table))
    logger.info(f"Wrote binding table for {table.target.__qualname__} to {out_path}")
    return out_path


def _normalize_version(raw: Any) -> str:
    """Normalize ``config_version`` values such as ``1``, ``1.0`` or ``"1.0"`` to ``"1"``."""
    if raw is None:
        return ""
    ver = str(raw).strip()
    major, sep, minor = ver.partition(".")
    if sep and major.isdigit() and minor.isdigit() and not minor.strip("0"):
        return str(int(major))
    if ver.isdigit():
        return str(int(ver))
    return ver


def _normalize_yaml_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize YAML keys from kebab-case to snake_case.

    Args:
        data: Raw YAML data dictionary

    Returns:
        Dictionary with normalized keys
    """
    key_mapping = {
        # kebab-case -> snake_case
        "config-version": "config_version",
    }

    normalized = {}
    for key, value in data.items():
        normalized_key = key_mapping.get(key, key)
        normalized[normalized_key] = value

    return normalized
