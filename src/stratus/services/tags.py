from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field

from ..logger import logger
from ..protocols import CloudInstanceClient


class TagAction(BaseModel):
    kind: Literal["create", "delete"]
    resource_id: str
    tags: dict[str, str | None] = Field(default_factory=dict)


def plan_update(
    resource_id: str,
    to_create: Mapping[str, str],
    to_delete: Mapping[str, str | None],
) -> list[TagAction]:
    """
    Plans at most one batched create call and one batched delete call.
    A key present in both maps is only created: create wins.
    """
    actions = []

    if to_create:
        actions.append(
            TagAction(kind="create", resource_id=resource_id, tags=dict(to_create))
        )

    overlap = set(to_create) & set(to_delete)
    if overlap:
        logger.debug(
            f"Tags {sorted(overlap)} on {resource_id} are both created and deleted; "
            "keeping the created values"
        )

    delete = {k: v for k, v in to_delete.items() if k not in overlap}
    if delete:
        actions.append(TagAction(kind="delete", resource_id=resource_id, tags=delete))

    return actions


def apply_tag_actions(client: CloudInstanceClient, actions: list[TagAction]) -> None:
    for action in actions:
        if action.kind == "create":
            client.create_tags(action.resource_id, action.tags)
        else:
            client.delete_tags(action.resource_id, action.tags)
