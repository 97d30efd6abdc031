# SPDX-License-Identifier: Apache-2.0
"""Pydantic model for binding table files."""

from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Configuration versioning constants
CURRENT_CONFIG_VERSION = "1"
MIN_SUPPORTED_VERSION = "1"

_REFERENCE = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")


def _check_reference(value: str) -> str:
    value = value.strip()
    if not _REFERENCE.match(value):
        raise ValueError(f"Invalid reference '{value}', expected 'package.module:QualifiedName'")
    return value


class BindingConfig(BaseModel):
    """One handler method and the event types it is bound to."""

    model_config = ConfigDict(extra="forbid")

    method: str = Field(..., description="Handler method name on the target class", min_length=1)
    handles: List[str] = Field(
        default_factory=list,
        description="Event type references; empty means the type of the method parameter",
    )

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        v = v.strip()
        if not v.isidentifier():
            raise ValueError(f"Invalid method name: {v}")
        return v

    @field_validator("handles")
    @classmethod
    def validate_handles(cls, v: List[str]) -> List[str]:
        return [_check_reference(ref) for ref in v]


class BindingTableConfig(BaseModel):
    """File form of a binding table.

    Example::

        config_version: "1"
        target: myapp.presenters:ProfilePresenter
        bindings:
          - method: on_profile_loaded
            handles:
              - myapp.events:ProfileLoaded
    """

    model_config = ConfigDict(extra="forbid")

    config_version: str = Field(
        default=CURRENT_CONFIG_VERSION, description="Configuration schema version"
    )
    target: str = Field(..., description="Handler class reference (module:QualifiedName)")
    bindings: List[BindingConfig] = Field(default_factory=list)

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        return _check_reference(v)

    @model_validator(mode="after")
    def validate_unique_methods(self) -> BindingTableConfig:
        methods = [binding.method for binding in self.bindings]
        duplicates = sorted({m for m in methods if methods.count(m) > 1})
        if duplicates:
            raise ValueError(f"Methods listed more than once: {', '.join(duplicates)}")
        return self


__all__ = [
    "BindingConfig",
    "BindingTableConfig",
    "CURRENT_CONFIG_VERSION",
    "MIN_SUPPORTED_VERSION",
]
