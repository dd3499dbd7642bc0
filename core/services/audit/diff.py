from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

_MISSING = object()


@dataclass(frozen=True)
class FieldDiff:
    key: str
    old_value: Any
    new_value: Any
    kind: str

    @property
    def changed(self) -> bool:
        return self.kind != "unchanged"


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def compute_changed_fields(
    old_data: Mapping[str, Any] | None,
    new_data: Mapping[str, Any] | None,
) -> list[str]:
    """Keys that differ between two snapshots: changed, then added, then removed."""
    if not old_data and not new_data:
        return []
    old = dict(old_data or {})
    new = dict(new_data or {})
    changed: list[str] = []
    added: list[str] = []
    removed: list[str] = []
    for key in list(dict.fromkeys([*old.keys(), *new.keys()])):
        if key not in old:
            added.append(key)
        elif key not in new:
            removed.append(key)
        elif _canonical(old[key]) != _canonical(new[key]):
            changed.append(key)
    return [*changed, *added, *removed]


def field_diffs(
    old_data: Mapping[str, Any] | None,
    new_data: Mapping[str, Any] | None,
) -> list[FieldDiff]:
    old = dict(old_data or {})
    new = dict(new_data or {})
    diffs: list[FieldDiff] = []
    for key in list(dict.fromkeys([*old.keys(), *new.keys()])):
        old_value = old.get(key, _MISSING)
        new_value = new.get(key, _MISSING)
        if old_value is _MISSING:
            kind = "added"
        elif new_value is _MISSING:
            kind = "removed"
        elif _canonical(old_value) != _canonical(new_value):
            kind = "changed"
        else:
            kind = "unchanged"
        diffs.append(
            FieldDiff(
                key=key,
                old_value=None if old_value is _MISSING else old_value,
                new_value=None if new_value is _MISSING else new_value,
                kind=kind,
            )
        )
    # sorted() is stable, so discovery order survives inside each half.
    return sorted(diffs, key=lambda d: 0 if d.changed else 1)


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return json.dumps(value, indent=2, default=str)


__all__ = ["FieldDiff", "compute_changed_fields", "field_diffs", "format_value"]
