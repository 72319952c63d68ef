"""
Configuration management for modconsole.

- **app_configuration.py**: YAML configuration loader (``config/app_config.yml``)
  guarded by an fcntl shared lock. Falls back to defaults on missing or
  malformed files.

- **console_settings.py**: Typed wrappers for the ``directory`` and
  ``analytics`` sections.
"""
