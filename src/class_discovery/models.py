"""Base Pydantic models for discovery results and settings.

This module defines the foundational model classes used across the
library. Results are immutable and strictly validated so a produced
collection can be shared between readers without defensive copies.
"""

from pathlib import Path  # noqa: TC003
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

InstanceT = TypeVar('InstanceT')


class SchemaModel(BaseModel):
    """Base immutable model for all library structures.

    Design principles enforced by this model:
        - Immutability: models cannot be modified after creation.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos.
        - Arbitrary types: models may carry classes, instances and
          collaborator objects that Pydantic does not know about.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class ClassInfo(SchemaModel, Generic[InstanceT]):
    """Description of a class discovered in a source file.

    One entry is produced per matched file. The `instance` field is only
    populated in resolve mode, after the container produced an instance.
    """

    file: Path = Field(
        title='Source file',
        description='Absolute path of the file that exported the class.',
    )

    name: str = Field(
        title='Symbol name',
        description=(
            'Name of the exported symbol that was looked up. '
            'Equals the file base name unless a type matcher was supplied.'
        ),
    )

    type: Any = Field(
        title='Class',
        description='Loaded class object, not instantiated by discovery itself.',
    )

    instance: InstanceT | None = Field(
        default=None,
        title='Resolved instance',
        description='Instance produced by the container in resolve mode.',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
        - Tolerant schema handling: unknown or extra fields are ignored,
          so the surrounding environment may contain unrelated variables.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )


class DiscoverySettings(SettingsModel):
    """Settings resolved from `CLASS_DISCOVERY_*` environment variables."""

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
        env_prefix='CLASS_DISCOVERY_',
    )

    config_files: list[Path] = Field(
        default_factory=list,
        title='Configuration files',
        description=(
            'YAML files merged, in order, into the configuration source. '
            'Provided as a JSON list in the environment.'
        ),
    )

    strict_plugins: bool = Field(
        default=False,
        title='Strict plugins',
        description='Raise instead of warning when a registry plugin is broken.',
    )

    plugin_group: str = Field(
        default='class_discovery_plugins',
        min_length=1,
        title='Plugin entry point group',
        description='Entry point group scanned by the type registry.',
    )
