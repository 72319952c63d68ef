"""
Intervention threading and the listings built on it.

- **message_graph.py**: splits a snapshot into originals and responses and
  threads every original with its responses through an id index.

- **intervention_summary.py**: per-category counters, success rate and
  filters over flagged messages.

- **message_filters.py**: sender filter, search and pagination for message
  listings.
"""
