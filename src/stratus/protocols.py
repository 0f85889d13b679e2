"""Client interface the reconciler depends on.

Implementations own every provider-specific detail: wire field names,
payload encodings and error codes. The reconciler only sees canonical
`Instance` models and the `is_not_found` predicate.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .schemas.instance import Instance


class CloudInstanceClient(Protocol):
    def describe_instance(self, instance_id: str) -> Instance:
        """Returns the instance or raises (NotFound included)."""
        ...

    def run_instance(self, instance: Instance) -> Instance:
        """Creates exactly one instance and returns the provider's view of it."""
        ...

    def terminate_instance(self, instance_id: str) -> None: ...

    def set_security_groups(
        self, instance_id: str, group_ids: Sequence[str]
    ) -> None: ...

    def create_tags(self, resource_id: str, tags: Mapping[str, str]) -> None: ...

    def delete_tags(
        self, resource_id: str, tags: Mapping[str, str | None]
    ) -> None: ...

    def is_not_found(self, error: Exception) -> bool:
        """True when `error` means the instance does not exist, whatever its type."""
        ...
