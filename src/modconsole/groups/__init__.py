"""
Group identity reconciliation.

- **group_reconciliation.py**: merges directory and registry groups into one
  option per real-world group, tagged by origin and assignment.
- **group_sections.py**: selector sections and master-group assignment plans.
"""
