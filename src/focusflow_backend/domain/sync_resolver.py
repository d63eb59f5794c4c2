from __future__ import annotations

from enum import Enum


class Decision(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NO_CHANGE = "no_change"
    CONFLICT = "conflict"


def resolve(*, existing_version: int | None, incoming_version: int, deleted: bool) -> Decision:
    """Pure version-conflict resolver.

    - No DB/network/time.
    - Deterministic.

    Rules (deletes follow the same comparison as updates):
    - no stored row: CREATE, or DELETE (idempotent acknowledgement) for tombstones
    - stored == incoming: NO_CHANGE; the payload is not inspected, a client
      must advance the version to publish an edit
    - stored < incoming: UPDATE / DELETE, the stored version becomes `incoming`
    - stored > incoming: CONFLICT, the client edited a stale snapshot
    """

    if existing_version is None:
        return Decision.DELETE if deleted else Decision.CREATE

    existing = int(existing_version)
    incoming = int(incoming_version)

    if existing > incoming:
        return Decision.CONFLICT
    if existing == incoming:
        return Decision.NO_CHANGE
    return Decision.DELETE if deleted else Decision.UPDATE
