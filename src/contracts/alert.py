"""Модель оповіщення (Alert) — один набір міток, загорнутий для передачі."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# label name -> label value
LabelSet = dict[str, str]


@dataclass(slots=True)
class Alert:
    """Синтетичне оповіщення; його ідентичність — лише набір міток."""

    labels: LabelSet = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Wire form posted to the alert API (``labels`` omitted when empty)."""
        if not self.labels:
            return {}
        return {"labels": dict(self.labels)}

    @staticmethod
    def from_dict(obj: dict[str, Any]) -> Alert:
        labels = obj.get("labels") or {}
        return Alert(labels={str(k): str(v) for k, v in labels.items()})
