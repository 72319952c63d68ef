"""
Participant and community statistics.

- **engagement_tiers.py**: high/medium/low/silent thresholds and the tier
  distribution.
- **participant_stats.py**: per-participant counters, top contributors and
  roster search.
"""
