from __future__ import annotations

from dataclasses import dataclass

from schema_lint.fs import Dir
from schema_lint.policy.types import ConfigError

WORKSPACE_TYPES = ("temp-schema", "docker")


@dataclass(frozen=True)
class WorkspaceOptions:
    type: str
    schema_name: str
    flavor: str = ""
    default_character_set: str = ""
    default_collation: str = ""
    host: str = ""
    port: int = 3306


def options_for_dir(directory: Dir) -> WorkspaceOptions:
    config = directory.config
    workspace_type = config.get_enum("workspace", *WORKSPACE_TYPES)
    if workspace_type == "docker" and not config.changed("flavor"):
        raise ConfigError(f"Option workspace=docker requires option flavor to be set in {directory}")
    schema_name = config.get("temp-schema")
    if not schema_name:
        raise ConfigError(f"Option temp-schema cannot be empty in {directory}")
    return WorkspaceOptions(
        type=workspace_type,
        schema_name=schema_name,
        flavor=config.get("flavor"),
        default_character_set=config.get("default-character-set"),
        default_collation=config.get("default-collation"),
        host=config.get("host"),
        port=config.get_int("port"),
    )
