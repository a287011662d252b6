"""
Structural deep merge of override tables onto typed configuration records.

Overrides are plain nested mappings; the records they apply to are frozen
dataclasses. Merging walks the dataclass schema, so an override naming a
field the record does not have is rejected instead of being silently ignored.

Rules:
- A leaf field takes the override value when present, else keeps the base.
- A nested record merges key-by-key (never wholesale replacement from a mapping).
- A mapping field (e.g. subnet groups) merges key-by-key; new keys must
  describe a complete record.
"""

from dataclasses import fields, is_dataclass, replace
from enum import Enum
from typing import Any, Mapping, TypeVar

from infra.errors import ConfigError

T = TypeVar("T")


def deep_merge(base: T, override: Mapping[str, Any], path: str = "") -> T:
    """
    Overlay an override mapping onto a frozen dataclass.

    Args:
        base: Dataclass instance holding the default values
        override: Nested mapping of field name to override value
        path: Dotted path of ``base`` used in error messages

    Returns:
        A new instance of ``type(base)``; ``base`` is left untouched

    Raises:
        ConfigError: If the override names unknown fields or has the wrong shape
    """
    if not is_dataclass(base) or isinstance(base, type):
        raise ConfigError(f"Cannot merge into non-record value at '{path or '<root>'}'")
    if not isinstance(override, Mapping):
        raise ConfigError(
            f"Override for '{path or '<root>'}' must be a mapping",
            {"path": path, "type": type(override).__name__},
        )

    known = {f.name for f in fields(base)}
    unknown = sorted(set(override) - known)
    if unknown:
        raise ConfigError(
            f"Unknown override field(s) for '{path or '<root>'}': {', '.join(unknown)}",
            {"path": path, "fields": unknown},
        )

    changes: dict[str, Any] = {}
    for name, value in override.items():
        field_path = f"{path}.{name}" if path else name
        changes[name] = _merge_value(getattr(base, name), value, field_path)

    return replace(base, **changes)


def _merge_value(current: Any, value: Any, path: str) -> Any:
    """Merge a single field value according to the shape of the current value."""
    if is_dataclass(current):
        if isinstance(value, type(current)):
            return value
        return deep_merge(current, value, path)

    if isinstance(current, Mapping):
        if not isinstance(value, Mapping):
            raise ConfigError(
                f"Override for '{path}' must be a mapping",
                {"path": path, "type": type(value).__name__},
            )
        return _merge_mapping(current, value, path)

    if isinstance(current, Enum) and isinstance(value, str) and not isinstance(value, Enum):
        try:
            return type(current)(value)
        except ValueError:
            # Left as-is; the validator reports enum membership failures
            return value

    return value


def _merge_mapping(current: Mapping[str, Any], override: Mapping[str, Any], path: str) -> dict[str, Any]:
    """Merge a mapping of records key-by-key, preserving declaration order."""
    record_types = {type(v) for v in current.values() if is_dataclass(v)}
    record_type = record_types.pop() if len(record_types) == 1 else None

    merged = dict(current)
    for key, value in override.items():
        key_path = f"{path}.{key}"
        if key in merged:
            merged[key] = _merge_value(merged[key], value, key_path)
        elif is_dataclass(value) or record_type is None:
            merged[key] = value
        else:
            merged[key] = _construct(record_type, value, key_path)
    return merged


def _construct(record_type: type, value: Any, path: str) -> Any:
    """Build a complete record for a key that has no default to merge into."""
    if not isinstance(value, Mapping):
        raise ConfigError(
            f"Override for '{path}' must be a mapping",
            {"path": path, "type": type(value).__name__},
        )
    coerced = dict(value)
    for f in fields(record_type):
        raw = coerced.get(f.name)
        if isinstance(f.type, type) and issubclass(f.type, Enum) and isinstance(raw, str):
            try:
                coerced[f.name] = f.type(raw)
            except ValueError:
                pass
    try:
        return record_type(**coerced)
    except TypeError as exc:
        raise ConfigError(
            f"Incomplete or unknown fields for new entry '{path}': {exc}",
            {"path": path},
        ) from exc
