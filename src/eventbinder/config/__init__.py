# SPDX-License-Identifier: Apache-2.0
"""Binding table file support."""

from __future__ import annotations

from .loader import (
    ConfigVersionError,
    build_binding_table,
    dump_binding_table,
    load_binding_table,
    load_binding_table_config,
    resolve_reference,
    write_binding_table,
)
from .table import (
    CURRENT_CONFIG_VERSION,
    MIN_SUPPORTED_VERSION,
    BindingConfig,
    BindingTableConfig,
)

__all__ = [
    "BindingConfig",
    "BindingTableConfig",
    "ConfigVersionError",
    "CURRENT_CONFIG_VERSION",
    "MIN_SUPPORTED_VERSION",
    "build_binding_table",
    "dump_binding_table",
    "load_binding_table",
    "load_binding_table_config",
    "resolve_reference",
    "write_binding_table",
]
