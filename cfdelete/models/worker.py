"""Worker model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from cfdelete.models.binding import Binding


@dataclass
class WorkerInfo:
    """Deployed worker script.

    Attributes:
        name: Script name (unique within the account)
        account_id: Owning account id
        created_on: Creation time reported by the provider (optional)
        modified_on: Last modification time (optional)
        bindings: Declared bindings, empty until fetched
    """

    name: str
    account_id: str = ""
    created_on: Optional[datetime] = None
    modified_on: Optional[datetime] = None
    bindings: list[Binding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "account_id": self.account_id,
            "created_on": self.created_on.isoformat() if self.created_on else None,
            "modified_on": self.modified_on.isoformat() if self.modified_on else None,
            "bindings": [
                {"type": b.binding_type.value, "name": b.name, "resource_id": b.resource_id} for b in self.bindings
            ],
        }
