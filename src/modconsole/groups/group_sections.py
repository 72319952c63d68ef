"""
Selector sections and master-group assignment planning for reconciled options.
"""

from __future__ import annotations

from typing import Iterable

from modconsole.datatypes.group_datatypes import (
    EnhancedGroupOption,
    GroupAssignmentPlan,
    GroupOptionSections,
    GroupOrigin,
)


def section_group_options(options: Iterable[EnhancedGroupOption]) -> GroupOptionSections:
    """Split options into the selector's available-by-origin and assigned lists.

    Input order is kept within every section.
    """
    rows = tuple(options)
    available = [o for o in rows if not o.already_assigned]
    return GroupOptionSections(
        external_only=tuple(o for o in available if o.origin is GroupOrigin.EXTERNAL_ONLY),
        both=tuple(o for o in available if o.origin is GroupOrigin.BOTH),
        local_only=tuple(o for o in available if o.origin is GroupOrigin.LOCAL_ONLY),
        assigned=tuple(o for o in rows if o.already_assigned),
    )


def plan_group_assignment(option: EnhancedGroupOption, master_group_id: str) -> GroupAssignmentPlan:
    """Decide the registry writes that put ``option`` under ``master_group_id``.

    Options with a local row are moved in place; directory-only options need a
    local row created first.

    Raises:
        ValueError: If the master group id is empty.
    """
    if not master_group_id:
        raise ValueError("A master group must be selected before assigning a group")
    return GroupAssignmentPlan(
        master_group_id=master_group_id,
        name=option.name,
        create_local=option.local_id is None,
        local_id=option.local_id,
        external_group_id=option.external_group_id,
    )
