"""
Group identities from the local registry and the external directory, and the
reconciled option rows built from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class GroupOrigin(Enum):
    """Which source(s) a reconciled group option was seen in."""

    EXTERNAL_ONLY = "external-only"
    BOTH = "both"
    LOCAL_ONLY = "local-only"

    def __str__(self) -> str:
        return self.value


# Selector ordering: directory-only groups first, registry-only groups last.
ORIGIN_PRIORITY = {
    GroupOrigin.EXTERNAL_ONLY: 0,
    GroupOrigin.BOTH: 1,
    GroupOrigin.LOCAL_ONLY: 2,
}


@dataclass(frozen=True, slots=True)
class Group:
    """A group row in the local registry."""

    group_id: str
    name: Optional[str] = None
    external_group_id: Optional[str] = None
    master_group_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class MasterGroup:
    """An operator-defined bundle of groups."""

    master_group_id: str
    name: str
    description: Optional[str] = None
    groups: Tuple[Group, ...] = ()


@dataclass(frozen=True, slots=True)
class ExternalGroupRecord:
    """A group as listed by the external directory service."""

    external_group_id: str
    name: str
    member_count: int = 0


@dataclass(frozen=True, slots=True)
class EnhancedGroupOption:
    """One selectable row per distinct real-world group.

    Attributes:
        option_id: Stable row key (``ext-<external id>`` or ``local-<local id>``).
        name: Display name.
        origin: Source(s) the group was found in.
        already_assigned: Whether the group already belongs to a master group.
        master_group_id: Owning master group when assigned.
        local_id: Registry id when a local row exists.
        external_group_id: Directory id when known.
        member_count: Member count reported by the directory, if any.
    """

    option_id: str
    name: str
    origin: GroupOrigin
    already_assigned: bool = False
    master_group_id: Optional[str] = None
    local_id: Optional[str] = None
    external_group_id: Optional[str] = None
    member_count: Optional[int] = None

    @property
    def has_local_entry(self) -> bool:
        return self.local_id is not None


@dataclass(frozen=True, slots=True)
class GroupOptionSections:
    """Reconciled options split the way the group selector lists them."""

    external_only: Tuple[EnhancedGroupOption, ...] = ()
    both: Tuple[EnhancedGroupOption, ...] = ()
    local_only: Tuple[EnhancedGroupOption, ...] = ()
    assigned: Tuple[EnhancedGroupOption, ...] = ()

    @property
    def available_count(self) -> int:
        return len(self.external_only) + len(self.both) + len(self.local_only)


@dataclass(frozen=True, slots=True)
class GroupAssignmentPlan:
    """Registry writes needed to put an option under a master group.

    ``create_local`` is True when the group only exists in the directory and a
    local row must be inserted (already carrying ``master_group_id``).
    Otherwise ``local_id`` is updated in place.
    """

    master_group_id: str
    name: str
    create_local: bool
    local_id: Optional[str] = None
    external_group_id: Optional[str] = None
