from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping

from ..core.bounds import DEFAULT_MAX_INTERVAL, normalize_bounds

if TYPE_CHECKING:
    from ..core.jitter import IntervalJitter


_KEY_ALIASES = {
    "min_interval": ("min_interval", "minInterval"),
    "max_interval": ("max_interval", "maxInterval"),
}


@dataclass(frozen=True)
class JitterConfig:
    """Interval bounds read from a settings mapping, already normalized."""

    min_interval: float = 0
    max_interval: float = DEFAULT_MAX_INTERVAL

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> JitterConfig:
        if not data:
            return cls()
        raw: Dict[str, Any] = {}
        for field_name, aliases in _KEY_ALIASES.items():
            for key in aliases:
                if key in data:
                    raw[field_name] = data[key]
                    break
        min_interval, max_interval = normalize_bounds(
            raw.get("min_interval", 0),
            raw.get("max_interval", DEFAULT_MAX_INTERVAL),
        )
        return cls(min_interval=min_interval, max_interval=max_interval)

    def apply(self, jitter: IntervalJitter) -> None:
        jitter.set_bounds(self.min_interval, self.max_interval)


__all__ = ["JitterConfig"]
