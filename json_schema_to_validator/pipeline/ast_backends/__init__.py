"""
Validator targets: builders, declarations and runtime loading.
"""

from __future__ import annotations

from .base import ExtrasMode, PropertySpec, SchemaBuilder, Target, TargetCapabilities
from .jsonschema_backend import JsonSchemaBuilder, JsonSchemaTarget
from .marshmallow_backend import MarshmallowBuilder, MarshmallowTarget
from .pydantic_backend import PydanticBuilder, PydanticTarget

__all__ = [
    "ExtrasMode",
    "JsonSchemaBuilder",
    "JsonSchemaTarget",
    "MarshmallowBuilder",
    "MarshmallowTarget",
    "PropertySpec",
    "PydanticBuilder",
    "PydanticTarget",
    "SchemaBuilder",
    "Target",
    "TargetCapabilities",
]
