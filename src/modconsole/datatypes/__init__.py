"""
Immutable record types shared by the engines and the collaborators.

- **message_datatypes.py**: messages, sender channels, threads.
- **participant_datatypes.py**: participants, engagement tiers, statistics.
- **group_datatypes.py**: local, master and directory groups, reconciled options.
- **analytics_datatypes.py**: windows, histograms, analytics and summaries.
"""
