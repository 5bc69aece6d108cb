"""Tri-state field changes for partial updates.

A PATCH body distinguishes three cases per field: the field was not sent
(UNCHANGED), sent with a value (SET), or sent empty / null (CLEARED).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict

from pydantic import BaseModel


class ChangeKind(str, enum.Enum):
    UNCHANGED = "unchanged"
    SET = "set"
    CLEARED = "cleared"


@dataclass(frozen=True)
class FieldChange:
    kind: ChangeKind
    value: Any = None

    def resolve(self, current: Any, nullable: bool = True) -> Any:
        """Return the value to store given the current one.

        Clearing a non-nullable field keeps the current value.
        """
        if self.kind is ChangeKind.SET:
            return self.value
        if self.kind is ChangeKind.CLEARED and nullable:
            return None
        return current


UNCHANGED = FieldChange(ChangeKind.UNCHANGED)
CLEARED = FieldChange(ChangeKind.CLEARED)


def set_to(value: Any) -> FieldChange:
    return FieldChange(ChangeKind.SET, value)


def changes_from(payload: BaseModel) -> Dict[str, FieldChange]:
    changes = {}
    for name in type(payload).model_fields:
        if name not in payload.model_fields_set:
            changes[name] = UNCHANGED
            continue
        value = getattr(payload, name)
        if value is None or value == "":
            changes[name] = CLEARED
        else:
            changes[name] = set_to(value)
    return changes
