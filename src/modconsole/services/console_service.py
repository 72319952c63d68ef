"""
ModerationConsoleService: feeds the engines from the message store, the
registry and the external directory.

Responsibilities:
- Fetch every snapshot an engine needs (concurrently where independent)
  before calling it, so engines only ever see fully resolved inputs
- Memoize analytics per (community, group scope, window bounds)
- Apply registry writes for master-group assignment and verified handles

All raw DB access is delegated to the repositories; the service never does
SQL itself.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from modconsole.analytics.analytics_engine import compute_community_analytics
from modconsole.analytics.time_windows import AnalyticsRange, InterventionPeriod, period_start, resolve_window
from modconsole.configuration.app_configuration import app_config
from modconsole.configuration.console_settings import AnalyticsSettings
from modconsole.database.db_connection import db_connection
from modconsole.datatypes.analytics_datatypes import CommunityAnalytics, InterventionSummary, MessagePage
from modconsole.datatypes.group_datatypes import EnhancedGroupOption, Group, GroupOptionSections
from modconsole.datatypes.message_datatypes import Message, SenderChannel, Thread
from modconsole.datatypes.participant_datatypes import CommunityStats, Participant
from modconsole.directory.directory_client import DirectoryClient
from modconsole.engagement.participant_stats import build_community_stats
from modconsole.groups.group_reconciliation import reconcile_group_options
from modconsole.groups.group_sections import plan_group_assignment, section_group_options
from modconsole.interventions.intervention_summary import summarize_interventions
from modconsole.interventions.message_filters import SenderFilter, filter_messages, paginate_messages
from modconsole.interventions.message_graph import build_threads, threads_for_participant
from modconsole.repositories.message_repo import MessageRepository
from modconsole.repositories.registry_repo import RegistryRepository
from modconsole.util.logger import get_logger
from modconsole.util.result_cache import ResultCache

logger = get_logger("console_service")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _scope(group_ids: Optional[Sequence[str]]) -> Optional[Tuple[str, ...]]:
    return None if group_ids is None else tuple(sorted(group_ids))


class ModerationConsoleService:
    """
    Read side of the moderation console plus the few registry writes it needs.

    - No SQL here: only repository calls and transactions.
    - ``group_ids=None`` means every group of the community; an empty
      sequence means none, which yields empty results.
    """

    def __init__(
        self,
        directory_client: Optional[DirectoryClient] = None,
        settings: Optional[AnalyticsSettings] = None,
        cache: Optional[ResultCache] = None,
    ) -> None:
        self._settings = settings or app_config.analytics
        self._directory = directory_client or DirectoryClient.from_settings(app_config.directory)
        self._cache = cache if cache is not None else ResultCache(self._settings.cache_ttl_seconds)
        self._message_repo = MessageRepository()
        self._registry_repo = RegistryRepository()

    async def initialize(self) -> None:
        """Open the database configured in ``app_config``."""
        await db_connection.open(app_config.database_path)
        logger.info("[CONSOLE SERVICE] Database initialized")

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    async def _messages_with_responses(
        self,
        community_id: str,
        group_ids: Optional[Sequence[str]],
        since: Optional[datetime],
        until: Optional[datetime],
    ) -> List[Message]:
        """Originals created in the window plus every response attached to them."""
        async with db_connection.read() as conn:
            originals = await self._message_repo.fetch(
                conn, community_id, group_ids, since=since, until=until, originals_only=True
            )
            responses = await self._message_repo.fetch_responses(conn, [m.message_id for m in originals])
        return originals + responses

    async def _name_maps(self, community_id: str) -> Tuple[Dict[str, str], Dict[str, str]]:
        async with db_connection.read() as conn:
            participants, groups = await asyncio.gather(
                self._registry_repo.fetch_participants(conn, community_id),
                self._registry_repo.fetch_groups(conn, community_id),
            )
        participant_names = {p.participant_id: p.label for p in participants}
        group_names = {g.group_id: g.name for g in groups if g.name}
        return participant_names, group_names

    # ------------------------------------------------------------------
    # Threads and participant history
    # ------------------------------------------------------------------

    async def load_threads(
        self,
        community_id: str,
        group_ids: Optional[Sequence[str]] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        flagged_only: bool = True,
    ) -> Tuple[Thread, ...]:
        """Threads for the originals created in ``[since, until)``."""
        messages = await self._messages_with_responses(community_id, group_ids, since, until)
        return build_threads(messages, flagged_only=flagged_only)

    async def load_participant_history(
        self,
        community_id: str,
        participant_id: str,
        group_ids: Optional[Sequence[str]] = None,
    ) -> Tuple[Thread, ...]:
        messages = await self._messages_with_responses(community_id, group_ids, None, None)
        return threads_for_participant(messages, participant_id)

    # ------------------------------------------------------------------
    # Statistics and analytics
    # ------------------------------------------------------------------

    async def load_community_stats(
        self,
        community_id: str,
        group_ids: Optional[Sequence[str]] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> CommunityStats:
        async with db_connection.read() as conn:
            participants, messages = await asyncio.gather(
                self._registry_repo.fetch_participants(conn, community_id),
                self._message_repo.fetch(
                    conn, community_id, group_ids, since=since, until=until, originals_only=True
                ),
            )
        return build_community_stats(participants, messages, since=since, until=until)

    async def load_analytics(
        self,
        community_id: str,
        group_ids: Optional[Sequence[str]] = None,
        range_key: AnalyticsRange | str | None = None,
        now: Optional[datetime] = None,
    ) -> CommunityAnalytics:
        """
        Analytics for the window ending at ``now``.

        The current window, the previous window and the roster are fetched
        concurrently. Results are cached per (community, group scope, window
        bounds), so repeated calls with the same ``now`` are served from the
        cache until the TTL runs out. Without an explicit ``now`` the window
        ends at the current minute, so calls within one minute share an entry.

        Raises:
            ValueError: If ``range_key`` is not a known preset.
        """
        now = now or _utcnow().replace(second=0, microsecond=0)
        window = resolve_window(range_key or self._settings.default_range, now)
        cache_key = (community_id, _scope(group_ids), window.start, window.end)

        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        async with db_connection.read() as conn:
            current, previous, recent_roster, full_roster = await asyncio.gather(
                self._message_repo.fetch(
                    conn, community_id, group_ids, since=window.start, until=window.end, originals_only=True
                ),
                self._message_repo.fetch(
                    conn, community_id, group_ids, since=window.previous_start, until=window.start,
                    originals_only=True,
                ),
                self._registry_repo.fetch_participants(conn, community_id, joined_since=window.previous_start),
                self._registry_repo.fetch_participants(conn, community_id),
            )

        analytics = compute_community_analytics(
            current,
            previous,
            recent_roster,
            window,
            known_participants=full_roster,
        )
        self._cache.set(cache_key, analytics)
        return analytics

    # ------------------------------------------------------------------
    # Interventions and messages
    # ------------------------------------------------------------------

    async def load_intervention_summary(
        self,
        community_id: str,
        group_ids: Optional[Sequence[str]] = None,
        period: InterventionPeriod | str = InterventionPeriod.ALL,
        now: Optional[datetime] = None,
    ) -> InterventionSummary:
        now = now or _utcnow()
        async with db_connection.read() as conn:
            flagged = await self._message_repo.fetch_flagged(
                conn, community_id, group_ids, since=period_start(period, now)
            )
        return summarize_interventions(flagged, now)

    async def load_message_page(
        self,
        community_id: str,
        group_ids: Optional[Sequence[str]] = None,
        sender_filter: SenderFilter | str = SenderFilter.ALL,
        search: Optional[str] = None,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> MessagePage:
        """One page of the message log, newest first."""
        channels: Optional[List[SenderChannel]] = None
        sender_filter = SenderFilter(sender_filter)
        if sender_filter is SenderFilter.MEMBERS:
            channels = [SenderChannel.MEMBER]
        elif sender_filter is SenderFilter.BOTS:
            channels = [SenderChannel.COMMUNITY_BOT, SenderChannel.PRIVATE_BOT]

        async with db_connection.read() as conn:
            messages = await self._message_repo.fetch(conn, community_id, group_ids, sender_channels=channels)

        participant_names: Dict[str, str] = {}
        group_names: Dict[str, str] = {}
        if search:
            participant_names, group_names = await self._name_maps(community_id)

        selected = filter_messages(messages, sender_filter, search, participant_names, group_names)
        return paginate_messages(selected, page=page, per_page=per_page or self._settings.messages_per_page)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    async def load_group_options(self, community_id: str) -> Tuple[EnhancedGroupOption, ...]:
        """Directory listing reconciled against the local registry."""

        async def local_snapshot():
            async with db_connection.read() as conn:
                return await asyncio.gather(
                    self._registry_repo.fetch_groups(conn, community_id),
                    self._registry_repo.fetch_master_groups(conn, community_id),
                )

        external, (local_groups, master_groups) = await asyncio.gather(
            self._directory.fetch_groups_async(community_id),
            local_snapshot(),
        )
        return reconcile_group_options(external, local_groups, master_groups)

    async def load_group_sections(self, community_id: str) -> GroupOptionSections:
        return section_group_options(await self.load_group_options(community_id))

    async def create_master_group(self, community_id: str, name: str, description: Optional[str] = None) -> str:
        """
        Create an empty master group and return its id.

        Raises:
            ValueError: If ``name`` is blank.
        """
        if not name or not name.strip():
            raise ValueError("Master group name is required")
        master_group_id = uuid.uuid4().hex
        async with db_connection.transaction() as conn:
            await self._registry_repo.insert_master_group(conn, community_id, master_group_id, name, description)
        logger.info("[CONSOLE SERVICE] Created master group %s for community %s", master_group_id, community_id)
        return master_group_id

    async def assign_option_to_master(
        self,
        community_id: str,
        option: EnhancedGroupOption,
        master_group_id: str,
    ) -> str:
        """
        Put a reconciled option under a master group.

        Directory-only options first get a local group row carrying their
        external id. Returns the local group id.

        Raises:
            ValueError: If no master group is given.
        """
        plan = plan_group_assignment(option, master_group_id)

        async with db_connection.transaction() as conn:
            if plan.create_local:
                group_id = uuid.uuid4().hex
                await self._registry_repo.insert_group(
                    conn,
                    community_id,
                    Group(
                        group_id=group_id,
                        name=plan.name,
                        external_group_id=plan.external_group_id,
                        master_group_id=plan.master_group_id,
                    ),
                )
            else:
                group_id = plan.local_id
                await self._registry_repo.assign_group(conn, group_id, plan.master_group_id)

        self._cache.invalidate(community_id)
        logger.info(
            "[CONSOLE SERVICE] Group %s assigned to master group %s (created=%s)",
            group_id,
            plan.master_group_id,
            plan.create_local,
        )
        return group_id

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    async def update_verified_channel(
        self,
        community_id: str,
        participant_id: str,
        verified_channel_id: Optional[str],
    ) -> bool:
        """Set or clear a participant's verified handle; False if no such participant."""
        async with db_connection.transaction() as conn:
            updated = await self._registry_repo.update_verified_channel(conn, participant_id, verified_channel_id)
        if updated:
            self._cache.invalidate(community_id)
        return updated

    async def add_participants(self, participants: Iterable[Participant]) -> None:
        communities = set()
        async with db_connection.transaction() as conn:
            for participant in participants:
                await self._registry_repo.upsert_participant(conn, participant)
                communities.add(participant.community_id)
        for community_id in communities:
            self._cache.invalidate(community_id)

    async def record_messages(self, community_id: str, messages: Iterable[Message]) -> None:
        async with db_connection.transaction() as conn:
            await self._message_repo.insert_many(conn, messages)
        self._cache.invalidate(community_id)
