"""Worker binding model.

A binding is one declared dependency of a worker on a resource or value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class BindingType(Enum):
    """Binding kinds as reported by the worker settings endpoint."""

    KV = "kv_namespace"
    R2 = "r2_bucket"
    D1 = "d1"
    DURABLE_OBJECT = "durable_object_namespace"
    SERVICE = "service"
    QUEUE = "queue"
    HYPERDRIVE = "hyperdrive"
    VECTORIZE = "vectorize"
    PLAIN_TEXT = "plain_text"
    SECRET = "secret_text"
    MTLS = "mtls_certificate"

    @classmethod
    def parse(cls, value: str) -> Optional[BindingType]:
        """Return the matching binding type, or None for unknown kinds."""
        try:
            return cls(value)
        except ValueError:
            return None


# Kinds backed by an independently addressable store
ADDRESSABLE_TYPES = frozenset({BindingType.KV, BindingType.R2, BindingType.D1, BindingType.QUEUE})


@dataclass(frozen=True)
class Binding:
    """Binding entity.

    Attributes:
        binding_type: Kind of binding
        name: Local binding name, only meaningful inside the owning worker
        namespace_id: KV namespace id
        bucket_name: R2 bucket name
        database_id: D1 database id
        database_name: D1 database name (when the provider includes it)
        class_name: Durable Object class name
        script_name: Durable Object owning script or service target script
        queue_name: Queue name
    """

    binding_type: BindingType
    name: str = ""
    namespace_id: str = ""
    bucket_name: str = ""
    database_id: str = ""
    database_name: str = ""
    class_name: str = ""
    script_name: str = ""
    queue_name: str = ""

    @classmethod
    def from_api_dict(cls, raw: dict[str, Any]) -> Optional[Binding]:
        """Parse one element of a worker settings ``bindings`` array.

        Args:
            raw: Raw binding dictionary

        Returns:
            Binding, or None if the entry has no recognised type
        """
        type_value = raw.get("type")
        if not isinstance(type_value, str):
            return None

        binding_type = BindingType.parse(type_value)
        if binding_type is None:
            return None

        def _str(key: str) -> str:
            value = raw.get(key)
            return value if isinstance(value, str) else ""

        fields: dict[str, str] = {"name": _str("name")}

        if binding_type == BindingType.KV:
            fields["namespace_id"] = _str("namespace_id")
        elif binding_type == BindingType.R2:
            fields["bucket_name"] = _str("bucket_name")
        elif binding_type == BindingType.D1:
            fields["database_id"] = _str("id") or _str("database_id")
            fields["database_name"] = _str("database_name")
        elif binding_type == BindingType.DURABLE_OBJECT:
            fields["class_name"] = _str("class_name")
            fields["script_name"] = _str("script_name")
        elif binding_type == BindingType.SERVICE:
            fields["script_name"] = _str("service")
        elif binding_type == BindingType.QUEUE:
            fields["queue_name"] = _str("queue_name")

        return cls(binding_type=binding_type, **fields)

    @property
    def resource_id(self) -> str:
        """Kind-specific identifier used for delete and lookup calls."""
        if self.binding_type == BindingType.KV:
            return self.namespace_id
        if self.binding_type == BindingType.R2:
            return self.bucket_name
        if self.binding_type == BindingType.D1:
            return self.database_id
        if self.binding_type == BindingType.QUEUE:
            return self.queue_name
        if self.binding_type == BindingType.DURABLE_OBJECT:
            return self.class_name
        if self.binding_type == BindingType.SERVICE:
            return self.script_name
        return self.name

    @property
    def has_display_name(self) -> bool:
        """Whether the binding itself carries the resource's real name."""
        if self.binding_type in (BindingType.R2, BindingType.QUEUE):
            return True
        if self.binding_type == BindingType.D1:
            return bool(self.database_name)
        return False

    @property
    def provisional_name(self) -> str:
        """Best display name available without a remote lookup."""
        if self.binding_type == BindingType.KV:
            # KV bindings never carry the namespace title
            return self.name or self.namespace_id
        if self.binding_type == BindingType.D1:
            return self.database_name or self.name or self.database_id
        return self.resource_id or self.name


def resource_key(binding: Binding) -> Optional[str]:
    """Return the canonical cross-worker identity of a binding's resource.

    Derived only from the binding kind and its identifying field, never from
    the local binding name. Kinds without an addressable backing store
    (Durable Objects, services, text values, ...) return None.
    """
    if binding.binding_type not in ADDRESSABLE_TYPES:
        return None

    resource_id = binding.resource_id
    if not resource_id:
        return None

    prefix = {
        BindingType.KV: "kv",
        BindingType.R2: "r2",
        BindingType.D1: "d1",
        BindingType.QUEUE: "queue",
    }[binding.binding_type]
    return f"{prefix}:{resource_id}"
