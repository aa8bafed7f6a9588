"""Configuration loading and validation for YAML-based pathfinder configs."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from pathfinder.core.errors import ConfigLoadError, ConfigValidationError
from pathfinder.core.model import Config, MovementPlan, ProviderConfig, Step

LOGGER = logging.getLogger(__name__)

CONFIG_ENV = "PATHFINDER_CONFIG"
ADDRESS_ENV = "PATHFINDER_ADDRESS"
API_KEY_ENV = "PATHFINDER_API_KEY"
DEFAULT_TIMEOUT_S = 10.0


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# YAML 1.1 turns on/off/yes/no into booleans; keep them as strings.
for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("pathfinder.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_config_path() -> Path:
    explicit = os.environ.get(CONFIG_ENV)
    if explicit:
        return Path(explicit)
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "pathfinder/pathfinder.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")
    return loaded


def _normalize_bool(value: Any, *, context: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ConfigValidationError(f"{context} must be boolean true/false")


def _build_plan(doc: dict[str, Any]) -> MovementPlan:
    return MovementPlan(
        name=doc["name"],
        persist=_normalize_bool(doc.get("persist", True), context="movement.persist"),
        steps=tuple(
            Step(angle=int(raw["angle"]), direction=raw["direction"], distance=float(raw["distance"]))
            for raw in doc["steps"]
        ),
    )


def build_config(
    doc: dict[str, Any],
    source: Path | str = "<config>",
    *,
    environ: Mapping[str, str] | None = None,
) -> Config:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    env = os.environ if environ is None else environ
    provider_doc = doc.get("provider", {})
    address = env.get(ADDRESS_ENV) or provider_doc.get("address")
    if not address:
        raise ConfigValidationError(
            f"No device address configured: set provider.address in {source} or {ADDRESS_ENV}"
        )
    api_key = env.get(API_KEY_ENV) or provider_doc.get("api_key")

    movement = doc.get("movement")
    return Config(
        provider=ProviderConfig(
            address=address,
            api_key=api_key or None,
            timeout_s=float(provider_doc.get("timeout_s", DEFAULT_TIMEOUT_S)),
        ),
        movement=_build_plan(movement) if movement is not None else None,
    )


def load_config(path: Path | None = None, *, environ: Mapping[str, str] | None = None) -> Config:
    config_path = path or default_config_path()
    LOGGER.debug("Loading configuration from %s", config_path)
    doc = _read_yaml(config_path)
    return build_config(doc, config_path, environ=environ)
