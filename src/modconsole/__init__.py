"""
modconsole - Core of a Community Moderation Console

modconsole turns raw community message logs and group registries into the
derived views a moderation console shows: who asked what and how the bots
answered, how engaged each member is, how activity changes over time, and
which messaging groups exist locally, in the external directory, or both.

Core Components:

- **Message Graph Builder**: Pairs every original message with the bot
  responses that point at it and classifies how it was answered
- **Statistics Aggregator**: Per-participant message and assistance counts,
  engagement tiers and top contributors
- **Analytics Engine**: Volume, growth, activity histograms, content signals
  and engagement for a time window compared with the window before it
- **Group Reconciliation**: Merges directory groups with local groups and
  master-group membership into one deduplicated, sorted option list
- **Console Service**: Fetches snapshots from SQLite and the directory and
  runs the engines

Usage:
    from modconsole.services.console_service import ModerationConsoleService
    service = ModerationConsoleService()
    await service.initialize()
    analytics = await service.load_analytics("community-1", range_key="30days")
"""
