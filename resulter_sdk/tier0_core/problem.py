"""
resulter_sdk.tier0_core.problem
────────────────────────────────
RFC 7807 problem details model. A Problem is owned by exactly one Envelope
and is created lazily on first enrichment.

Merge policy:
  - extensions are additive: a key is inserted only if absent, existing
    entries are never overwritten
  - top-level fields (type/title/detail/status) are plain attributes and
    later writers overwrite earlier ones
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from resulter_sdk.tier0_core.http import DEFAULT_TYPE_URI

DEFAULT_TITLE = "A problem occurred."
DEFAULT_DETAIL = "A problem occurred."


@dataclass
class Problem:
    """Structured failure description attached to a failed Envelope."""
    type: str = DEFAULT_TYPE_URI
    title: str = DEFAULT_TITLE
    detail: str = DEFAULT_DETAIL
    status: int | None = None
    instance: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def add_extension(self, key: str, value: Any) -> bool:
        """Insert *key* if absent. Returns True when the key was added."""
        if key in self.extensions:
            return False
        self.extensions[key] = value
        return True

    def merge_extensions(self, items: Mapping[str, Any]) -> list[str]:
        """Add-if-absent for every item; returns the keys actually inserted."""
        return [key for key, value in items.items() if self.add_extension(key, value)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
            "status": self.status,
            "instance": self.instance,
            "extensions": dict(self.extensions),
        }


__all__ = ["Problem", "DEFAULT_TITLE", "DEFAULT_DETAIL"]
