"""Field-level diff between two property snapshots.

The update-properties requests of the Sheets API take a sparse ``properties``
object plus a ``fields`` mask naming exactly the fields to overwrite. Both
are derived here from the dataclass metadata declared in
``sheetsync.models``, so every property type gets the same rules:

- fields equal by value are omitted, even if the caller set them explicitly
- nested property objects contribute dotted paths
  (``gridProperties.frozenRowCount``)
- identity fields (``sheetId``) never enter the mask
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import Any

from sheetsync.models import to_api


@dataclass(frozen=True)
class PropertyDiff:
    """Sparse payload and field mask for one properties update."""

    properties: dict[str, Any]
    fields: tuple[str, ...]

    @property
    def mask(self) -> str:
        """Comma-joined field mask as sent to the API."""
        return ",".join(self.fields)

    def __bool__(self) -> bool:
        return bool(self.fields)


def diff_properties(current: Any, proposed: Any) -> PropertyDiff:
    """Compare two snapshots of the same property type field by field.

    Args:
        current: Last-known snapshot
        proposed: Desired snapshot

    Returns:
        PropertyDiff holding only the changed fields

    Raises:
        TypeError: If the snapshots are not the same property type
    """
    if type(current) is not type(proposed) or not is_dataclass(proposed):
        raise TypeError(
            f"Cannot diff {type(current).__name__} against {type(proposed).__name__}"
        )
    properties, paths = _diff(current, proposed, prefix="")
    return PropertyDiff(properties=properties, fields=tuple(paths))


def _diff(current: Any, proposed: Any, prefix: str) -> tuple[dict[str, Any], list[str]]:
    properties: dict[str, Any] = {}
    paths: list[str] = []

    for f in fields(proposed):
        if f.metadata.get("identity"):
            continue
        name = f.metadata.get("api", f.name)
        old = getattr(current, f.name)
        new = getattr(proposed, f.name)

        if f.metadata.get("nested") and old is not None and new is not None:
            sub_properties, sub_paths = _diff(old, new, prefix=f"{prefix}{name}.")
            if sub_paths:
                properties[name] = sub_properties
                paths.extend(sub_paths)
            continue

        if old == new:
            continue
        properties[name] = to_api(new)
        paths.append(f"{prefix}{name}")

    return properties, paths
