"""
Merges the external directory's group listing with the local registry.

Each real-world group appears exactly once in the result:

1. Every distinct directory record claims the first unclaimed local group
   with the same external id or, for local groups with no external id, the
   same exact name. A claim yields ``both``; no claim yields
   ``external-only``.
2. Every unclaimed local group with a name becomes ``local-only``. Unnamed
   local groups cannot be displayed or picked and are left out.
3. An option is assigned when its local group belongs to a master group.
   Directory-only options are also assigned when a master group member carries
   their external id.

Two directory records with different ids stay separate even when their names
collide, and a local group is never claimed twice.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from modconsole.datatypes.group_datatypes import (
    ORIGIN_PRIORITY,
    EnhancedGroupOption,
    ExternalGroupRecord,
    Group,
    GroupOrigin,
    MasterGroup,
)
from modconsole.util.logger import get_logger

logger = get_logger("group_reconciliation")


def _find_local_match(
    record: ExternalGroupRecord,
    local_groups: Sequence[Group],
    claimed: Set[str],
) -> Optional[Group]:
    for group in local_groups:
        if group.group_id in claimed:
            continue
        if group.external_group_id is not None:
            if group.external_group_id == record.external_group_id:
                return group
        elif record.name and group.name == record.name:
            return group
    return None


def _membership_index(master_groups: Iterable[MasterGroup]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Map member local ids and member external ids to their master group (first wins)."""
    by_local: Dict[str, str] = {}
    by_external: Dict[str, str] = {}
    for master in master_groups:
        for member in master.groups:
            by_local.setdefault(member.group_id, master.master_group_id)
            if member.external_group_id:
                by_external.setdefault(member.external_group_id, master.master_group_id)
    return by_local, by_external


def sort_key(option: EnhancedGroupOption):
    """Unassigned first, then origin priority, then case-insensitive name."""
    return (option.already_assigned, ORIGIN_PRIORITY[option.origin], option.name.casefold())


def reconcile_group_options(
    external_groups: Iterable[ExternalGroupRecord],
    local_groups: Iterable[Group],
    master_groups: Iterable[MasterGroup],
) -> Tuple[EnhancedGroupOption, ...]:
    """Build the deduplicated, sorted group option list.

    Args:
        external_groups: Directory listing; empty when the directory is
            unreachable, which leaves only local-only options.
        local_groups: Groups in the local registry.
        master_groups: Master groups with their member groups.

    Returns:
        One option per distinct group, sorted for the selector.
    """
    locals_ = tuple(local_groups)
    by_local, by_external = _membership_index(master_groups)

    options: List[EnhancedGroupOption] = []
    claimed: Set[str] = set()
    seen_external: Set[str] = set()
    duplicates = 0

    for record in external_groups:
        if record.external_group_id in seen_external:
            duplicates += 1
            continue
        seen_external.add(record.external_group_id)

        match = _find_local_match(record, locals_, claimed)
        if match is not None:
            claimed.add(match.group_id)
            master_id = by_local.get(match.group_id)
        else:
            master_id = by_external.get(record.external_group_id)

        options.append(
            EnhancedGroupOption(
                option_id=f"ext-{record.external_group_id}",
                name=record.name or (match.name if match is not None else None) or "",
                origin=GroupOrigin.BOTH if match is not None else GroupOrigin.EXTERNAL_ONLY,
                already_assigned=master_id is not None,
                master_group_id=master_id,
                local_id=match.group_id if match is not None else None,
                external_group_id=record.external_group_id,
                member_count=record.member_count,
            )
        )

    for group in locals_:
        if group.group_id in claimed or group.name is None:
            continue
        claimed.add(group.group_id)
        master_id = by_local.get(group.group_id)
        options.append(
            EnhancedGroupOption(
                option_id=f"local-{group.group_id}",
                name=group.name,
                origin=GroupOrigin.LOCAL_ONLY,
                already_assigned=master_id is not None,
                master_group_id=master_id,
                local_id=group.group_id,
                external_group_id=group.external_group_id,
            )
        )

    options.sort(key=sort_key)
    logger.debug(
        "[RECONCILE] %d options (%d duplicate directory records skipped)",
        len(options),
        duplicates,
    )
    return tuple(options)
