"""
Utility helpers for modconsole.

- **logger.py**: Centralized logging with colored prompt_toolkit console
  output and a per-session rotating log file under ``logs/``.

- **result_cache.py**: Small TTL cache the console service uses to memoize
  derived views keyed on (community, group scope, window bounds).
"""
