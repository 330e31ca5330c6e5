"""Access control rules: which role may perform which action on a resource."""

from enum import Enum


class Resource(str, Enum):
    ALBUMS = "albums"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LIKE = "like"


ALL_ACTIONS = frozenset(Action)

RULES: dict[str, dict[Resource, frozenset[Action]]] = {
    "admin": {
        Resource.ALBUMS: ALL_ACTIONS,
    },
    "member": {
        Resource.ALBUMS: frozenset(
            {Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE, Action.LIKE}
        ),
    },
    "guest": {
        Resource.ALBUMS: frozenset({Action.READ}),
    },
}


def allow(role: str, resource: Resource, action: Action) -> bool:
    return action in RULES.get(role, {}).get(resource, frozenset())
