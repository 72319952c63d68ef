"""
HTTP client for the external group directory.

The directory lists the messaging-platform groups an organization owns:

    GET {base_url}/api/whatsapp-groups?organizationId=<community>
    -> {"success": true, "groups": [{"uuid": ..., "name": ..., "size": ...}]}

A directory outage must never break the console, so every failure is
logged and reported as an empty list.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import requests

from modconsole.configuration.console_settings import DirectorySettings
from modconsole.datatypes.group_datatypes import ExternalGroupRecord
from modconsole.util.logger import get_logger

logger = get_logger("directory_client")

GROUPS_ENDPOINT = "/api/whatsapp-groups"


def parse_group_records(payload: Any) -> List[ExternalGroupRecord]:
    """Turn a directory response body into records; malformed entries are skipped."""
    if not isinstance(payload, dict) or not payload.get("success"):
        return []
    groups = payload.get("groups")
    if not isinstance(groups, list):
        return []

    records: List[ExternalGroupRecord] = []
    for entry in groups:
        if not isinstance(entry, dict) or not entry.get("uuid"):
            continue
        try:
            member_count = int(entry.get("size") or 0)
        except (TypeError, ValueError):
            member_count = 0
        records.append(
            ExternalGroupRecord(
                external_group_id=str(entry["uuid"]),
                name=str(entry.get("name") or ""),
                member_count=member_count,
            )
        )
    return records


class DirectoryClient:
    """Fetches a community's external groups."""

    def __init__(self, base_url: Optional[str], timeout_seconds: float = 5.0, enabled: bool = True) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout_seconds = timeout_seconds
        self.enabled = enabled

    @classmethod
    def from_settings(cls, settings: DirectorySettings) -> "DirectoryClient":
        return cls(settings.base_url, settings.timeout_seconds, settings.enabled)

    def fetch_groups(self, community_id: str) -> List[ExternalGroupRecord]:
        """
        Fetch the external groups of a community.

        Returns:
            The groups reported by the directory, or an empty list if the
            directory is disabled, unreachable or answers with an error.
        """
        if not self.enabled or not self.base_url:
            return []

        url = f"{self.base_url}{GROUPS_ENDPOINT}"
        try:
            response = requests.get(
                url,
                params={"organizationId": community_id},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.error(f"[DIRECTORY] Request failed for {url}: {exc}")
            return []
        except ValueError as exc:
            logger.error(f"[DIRECTORY] Invalid JSON from {url}: {exc}")
            return []

        records = parse_group_records(payload)
        if not records and not (isinstance(payload, dict) and payload.get("success")):
            logger.warning(f"[DIRECTORY] Directory reported failure for community {community_id}")
        logger.debug(f"[DIRECTORY] {len(records)} groups for community {community_id}")
        return records

    async def fetch_groups_async(self, community_id: str) -> List[ExternalGroupRecord]:
        """Run ``fetch_groups`` in a worker thread."""
        return await asyncio.to_thread(self.fetch_groups, community_id)
