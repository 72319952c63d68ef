from typing import Any, Dict


class DirectorySettings:
    """Typed accessors for the ``directory`` section of the app config.

    Mirrors the raw mapping and exposes the fields the directory client
    needs. Unknown keys stay reachable through ``get``.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    @property
    def enabled(self) -> bool:
        return bool(self.data.get("enabled", True))

    @property
    def base_url(self) -> str | None:
        val = self.data.get("base_url")
        return str(val).rstrip("/") if val else None

    @property
    def timeout_seconds(self) -> float:
        return float(self.data.get("timeout_seconds", 5.0))


class AnalyticsSettings:
    """Typed accessors for the ``analytics`` section of the app config."""

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    @property
    def default_range(self) -> str:
        return str(self.data.get("default_range", "30days"))

    @property
    def cache_ttl_seconds(self) -> float:
        return float(self.data.get("cache_ttl_seconds", 60.0))

    @property
    def messages_per_page(self) -> int:
        value = int(self.data.get("messages_per_page", 50))
        return value if value > 0 else 50
