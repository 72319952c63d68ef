"""
Time-windowed analytics.

- **time_windows.py**: range presets and the current/previous window bounds.
- **activity_histograms.py**: hourly and seven-day histograms and their peaks.
- **content_signals.py**: question, link and emoji detection, mean length.
- **analytics_engine.py**: growth rates and the full analytics record.
"""
