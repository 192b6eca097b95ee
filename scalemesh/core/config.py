"""Configuration helpers for ScaleMesh.

This module loads optional YAML configuration files to customize how node
groups are compared. Configuration precedence:

1. Environment variable ``SCALEMESH_CONFIG`` pointing to a YAML file.
2. ``scalemesh.yaml`` in the current working directory.
3. Built-in defaults bundled with the package (``config/default.yaml``).
"""

from __future__ import annotations

import inspect
import importlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from scalemesh.config.policy import normalize_difference_ratios
from scalemesh.core.nodegroupset.comparator import (
    CallableComparator,
    ComparatorResolver,
    DefaultNodeComparator,
    NodeInfoComparator,
    available_comparators as _available_comparators,
    register_comparator,
    unregister_comparator,
)
from scalemesh.core.nodegroupset.processor import BalancingNodeGroupSetProcessor, new_default_processor

__all__ = [
    "BalancingConfig",
    "ComparatorConfigEntry",
    "create_processor_from_config",
    "get_balancing_config",
    "reset_balancing_config",
]

logger = logging.getLogger(__name__)

_ENV_VAR = "SCALEMESH_CONFIG"
_FACTORY_PARAMS = {"ignored_labels", "difference_ratios"}


@dataclass
class ComparatorConfigEntry:
    name: str
    import_path: Optional[str] = None
    enabled: bool = True


@dataclass
class BalancingConfig:
    comparator: str = "default"
    ignored_labels: List[str] = field(default_factory=list)
    # None selects the built-in ratios; {} disables resource comparison.
    difference_ratios: Optional[Dict[str, float]] = None
    comparators: List[ComparatorConfigEntry] = field(default_factory=list)


_balancing_config: Optional[BalancingConfig] = None


def _resolve_config_path() -> Optional[Path]:
    env_path = os.environ.get(_ENV_VAR)
    if env_path:
        candidate = Path(env_path).expanduser()
        if candidate.is_file():
            return candidate
        logger.warning("%s points to missing file %s, ignoring", _ENV_VAR, candidate)

    cwd_file = Path.cwd() / "scalemesh.yaml"
    if cwd_file.is_file():
        return cwd_file
    return None


def _load_yaml_dict() -> Dict[str, object]:
    path = _resolve_config_path()
    if path is not None:
        logger.debug("Loading balancing configuration from %s", path)
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}

    # Fallback to bundled default configuration
    from importlib import resources

    text = resources.files("scalemesh.config").joinpath("default.yaml").read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


def _coerce_comparator_entry(raw: Dict[str, object]) -> ComparatorConfigEntry:
    name = str(raw.get("name", "")).strip()
    if not name:
        raise ValueError("Comparator entry requires a non-empty 'name'")
    import_path = raw.get("import")
    if import_path is not None:
        import_path = str(import_path).strip()
    enabled = bool(raw.get("enabled", True))
    return ComparatorConfigEntry(name=name, import_path=import_path, enabled=enabled)


def _build_balancing_config(data: Dict[str, object]) -> BalancingConfig:
    node = data.get("balancing", {}) or {}
    if not isinstance(node, dict):
        raise ValueError("'balancing' section must be a mapping")

    comparator = str(node.get("comparator", "default") or "").strip() or "default"

    raw_labels = node.get("ignored_labels", []) or []
    if not isinstance(raw_labels, list):
        raise ValueError("'ignored_labels' must be a list of label keys")
    ignored_labels = [str(label).strip() for label in raw_labels if str(label).strip()]

    raw_ratios = node.get("difference_ratios")
    if raw_ratios is not None and not isinstance(raw_ratios, dict):
        raise ValueError("'difference_ratios' must be a mapping of resource name to ratio")
    difference_ratios = normalize_difference_ratios(raw_ratios) if raw_ratios is not None else None

    raw_entries = node.get("comparators", [])
    entries: List[ComparatorConfigEntry] = []
    if isinstance(raw_entries, list):
        for item in raw_entries:
            if not isinstance(item, dict):
                raise ValueError("Each comparator definition must be a mapping")
            entries.append(_coerce_comparator_entry(item))
    elif raw_entries:
        raise ValueError("'comparators' must be a list of mappings")

    return BalancingConfig(
        comparator=comparator,
        ignored_labels=ignored_labels,
        difference_ratios=difference_ratios,
        comparators=entries,
    )


def _coerce_comparator_resolver(obj: object) -> ComparatorResolver:
    if inspect.isclass(obj) and issubclass(obj, NodeInfoComparator):  # type: ignore[arg-type]
        if issubclass(obj, DefaultNodeComparator):
            return lambda labels, ratios: obj(labels, ratios)  # type: ignore[arg-type]
        return lambda _labels, _ratios: obj()  # type: ignore[arg-type]

    if isinstance(obj, NodeInfoComparator):
        return lambda _labels, _ratios: obj

    if callable(obj):
        params = set(inspect.signature(obj).parameters)
        if params & _FACTORY_PARAMS:
            # Factory taking the configured labels and ratios.
            def _call_factory(labels, ratios) -> NodeInfoComparator:
                instance = obj(ignored_labels=labels, difference_ratios=ratios)
                if not isinstance(instance, NodeInfoComparator):
                    raise TypeError("Comparator factory must return a NodeInfoComparator")
                return instance

            return _call_factory
        return lambda _labels, _ratios: CallableComparator(obj)  # type: ignore[arg-type]

    raise TypeError("Unsupported comparator factory type")


def _apply_balancing_config(config: BalancingConfig) -> None:
    for entry in config.comparators:
        if not entry.enabled:
            unregister_comparator(entry.name)
            continue
        resolver = None
        if entry.import_path:
            module_name, sep, attr = entry.import_path.partition(":")
            if not sep:
                raise ValueError(
                    f"Invalid import path '{entry.import_path}'. Expected format 'module:attr'."
                )
            module = importlib.import_module(module_name)
            obj = getattr(module, attr)
            resolver = _coerce_comparator_resolver(obj)
        if resolver is not None:
            register_comparator(entry.name, resolver, replace=True)

    if config.comparator.lower() not in _available_comparators():
        raise ValueError(
            f"Comparator '{config.comparator}' is not registered. Available: {', '.join(_available_comparators())}"
        )


def get_balancing_config() -> BalancingConfig:
    global _balancing_config
    if _balancing_config is None:
        raw = _load_yaml_dict()
        config = _build_balancing_config(raw)
        _apply_balancing_config(config)
        _balancing_config = config
    return _balancing_config


def reset_balancing_config() -> None:
    """Reset cached balancing configuration (intended for tests)."""
    global _balancing_config
    _balancing_config = None


def create_processor_from_config(config: Optional[BalancingConfig] = None) -> BalancingNodeGroupSetProcessor:
    """Build a processor from ``config`` or the loaded configuration."""
    if config is None:
        config = get_balancing_config()
    return new_default_processor(
        config.ignored_labels,
        config.difference_ratios,
        comparator=config.comparator,
    )
