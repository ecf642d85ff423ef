"""YAML config loading, saving and dotted-key access."""

import hashlib
from pathlib import Path
from typing import Any

import yaml

from surfcast.config.defaults import DEFAULT_BEACHES
from surfcast.config.schema import SurfcastConfig


def load_config(path: str | Path) -> SurfcastConfig:
    """Load and validate config from a YAML file.

    A missing or empty file yields the defaults, and an empty beach list is
    replaced with DEFAULT_BEACHES.
    """
    path = Path(path)
    raw: dict[str, Any] = {}
    if path.exists():
        raw = yaml.safe_load(path.read_text()) or {}

    if not raw.get("beaches"):
        raw["beaches"] = [b.model_dump() for b in DEFAULT_BEACHES]

    return SurfcastConfig.model_validate(raw)


def save_config(config: SurfcastConfig, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False))


def config_hash(config: SurfcastConfig) -> str:
    """Short SHA256 of the canonical JSON dump, stored alongside summary runs."""
    return hashlib.sha256(config.model_dump_json().encode()).hexdigest()[:16]


def _step(node: Any, part: str) -> Any:
    if isinstance(node, list):
        return node[int(part)]
    if isinstance(node, dict):
        return node[part]
    if hasattr(node, part):
        return getattr(node, part)
    raise KeyError(part)


def get_config_value(config: SurfcastConfig, dotted_key: str) -> Any:
    """Value at a dotted path such as ``pipeline.record_limit`` or ``beaches.0.region``."""
    node: Any = config
    try:
        for part in dotted_key.split("."):
            node = _step(node, part)
    except (KeyError, IndexError, ValueError) as e:
        raise KeyError(f"Config key not found: {dotted_key}") from e
    return node


def _coerce(old: Any, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    # bool before int: bool is an int subclass
    if isinstance(old, bool):
        return value.lower() in ("1", "true", "yes", "on")
    if isinstance(old, int):
        return int(value)
    if isinstance(old, float):
        return float(value)
    return value


def set_config_value(config: SurfcastConfig, dotted_key: str, value: Any) -> SurfcastConfig:
    """Copy of ``config`` with one value replaced, re-validated.

    String values are coerced to the type of the value they replace.
    """
    data = config.model_dump(mode="json")
    *parents, leaf = dotted_key.split(".")
    target: Any = data
    try:
        for part in parents:
            target = _step(target, part)
        old = _step(target, leaf)
    except (KeyError, IndexError, ValueError) as e:
        raise KeyError(f"Config key not found: {dotted_key}") from e

    if isinstance(target, list):
        target[int(leaf)] = _coerce(old, value)
    else:
        target[leaf] = _coerce(old, value)
    return SurfcastConfig.model_validate(data)
