"""
Maintenance gate.

Decides whether the whole site or a single module is under maintenance.
Settings are an immutable snapshot; every check takes the snapshot and the
current instant explicitly, so results are re-evaluated on each request as
end times pass.
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple, Callable, Dict, Any

from app.core.config import DEFAULT_MAINTENANCE_MESSAGE, MAINTENANCE_REFRESH_SECONDS
from app.core.subscription_lifecycle import as_utc, utcnow

logger = logging.getLogger(__name__)


def parse_end_time(value: Any) -> Optional[datetime]:
    """Accept a datetime, an ISO-8601 string (trailing Z allowed) or nothing."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


@dataclass(frozen=True)
class ModuleMaintenance:
    module_name: str
    is_enabled: bool = False
    message: Optional[str] = None
    end_time: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModuleMaintenance":
        return cls(
            module_name=data["module_name"],
            is_enabled=bool(data.get("is_enabled", False)),
            message=data.get("message") or None,
            end_time=parse_end_time(data.get("end_time")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_name": self.module_name,
            "is_enabled": self.is_enabled,
            "message": self.message,
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }


@dataclass(frozen=True)
class MaintenanceSettings:
    is_enabled: bool = False
    message: str = ""
    end_time: Optional[datetime] = None
    modules: Tuple[ModuleMaintenance, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaintenanceSettings":
        return cls(
            is_enabled=bool(data.get("is_enabled", False)),
            message=data.get("message") or "",
            end_time=parse_end_time(data.get("end_time")),
            modules=tuple(ModuleMaintenance.from_dict(m) for m in data.get("modules") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_enabled": self.is_enabled,
            "message": self.message,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "modules": [m.to_dict() for m in self.modules],
        }

    def find_module(self, module_name: Optional[str]) -> Optional[ModuleMaintenance]:
        if not module_name:
            return None
        for module in self.modules:
            if module.module_name == module_name:
                return module
        return None


@dataclass(frozen=True)
class MaintenanceStatus:
    blocked: bool
    message: str = ""
    end_time: Optional[datetime] = None


def _window_open(is_enabled: bool, end_time: Optional[datetime], now: datetime) -> bool:
    # No end time means the window stays open until disabled
    return is_enabled and (end_time is None or now < end_time)


def is_website_under_maintenance(
    settings: Optional[MaintenanceSettings],
    now: Optional[datetime] = None,
) -> bool:
    if settings is None:
        return False
    now = as_utc(now) or utcnow()
    return _window_open(settings.is_enabled, settings.end_time, now)


def is_module_under_maintenance(
    settings: Optional[MaintenanceSettings],
    module_name: str,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check whether a module is blocked.

    The global flag wins while its window is open; otherwise the module's
    own entry is checked under the same rule.
    """
    if settings is None:
        return False
    now = as_utc(now) or utcnow()
    if _window_open(settings.is_enabled, settings.end_time, now):
        return True
    module = settings.find_module(module_name)
    if module is None:
        return False
    return _window_open(module.is_enabled, module.end_time, now)


def get_maintenance_message(
    settings: Optional[MaintenanceSettings],
    module_name: Optional[str] = None,
) -> str:
    if settings is None:
        return ""
    module = settings.find_module(module_name)
    if module is not None and module.is_enabled and module.message:
        return module.message
    if settings.is_enabled:
        return settings.message or DEFAULT_MAINTENANCE_MESSAGE
    return ""


def get_maintenance_end_time(
    settings: Optional[MaintenanceSettings],
    module_name: Optional[str] = None,
) -> Optional[datetime]:
    if settings is None:
        return None
    module = settings.find_module(module_name)
    if module is not None and module.is_enabled:
        return module.end_time
    if settings.is_enabled:
        return settings.end_time
    return None


def check_maintenance(
    settings: Optional[MaintenanceSettings],
    module_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> MaintenanceStatus:
    """Evaluate block state, message and end time against one snapshot."""
    if module_name:
        blocked = is_module_under_maintenance(settings, module_name, now)
    else:
        blocked = is_website_under_maintenance(settings, now)
    if not blocked:
        return MaintenanceStatus(blocked=False)
    return MaintenanceStatus(
        blocked=True,
        message=get_maintenance_message(settings, module_name),
        end_time=get_maintenance_end_time(settings, module_name),
    )


class MaintenanceStore:
    """
    Holds the current maintenance snapshot.

    The snapshot is replaced wholesale, never mutated, so a reader sees
    either the old or the new settings. `refresh()` reloads from the loader
    once the refresh interval has elapsed. Every replacement bumps a
    generation counter; a reload that started before a newer `set()` is
    discarded.
    """

    def __init__(self, refresh_seconds: int = MAINTENANCE_REFRESH_SECONDS, clock: Callable[[], float] = time.monotonic):
        self._lock = threading.Lock()
        self._snapshot: Optional[MaintenanceSettings] = None
        self._loaded_at: Optional[float] = None
        self._generation = 0
        self._refresh_seconds = refresh_seconds
        self._clock = clock

    def snapshot(self) -> Optional[MaintenanceSettings]:
        return self._snapshot

    def _replace(self, settings: Optional[MaintenanceSettings], loaded_at: Optional[float]) -> None:
        # caller holds self._lock
        self._snapshot = settings
        self._loaded_at = loaded_at
        self._generation += 1

    def set(self, settings: Optional[MaintenanceSettings]) -> None:
        with self._lock:
            self._replace(settings, self._clock())

    def clear(self) -> None:
        with self._lock:
            self._replace(None, None)

    def is_stale(self) -> bool:
        loaded_at = self._loaded_at
        return loaded_at is None or self._clock() - loaded_at >= self._refresh_seconds

    def refresh(self, loader: Callable[[], Optional[MaintenanceSettings]], force: bool = False) -> Optional[MaintenanceSettings]:
        """Reload the snapshot from `loader` if stale (or forced) and return it."""
        with self._lock:
            if not force and not self.is_stale():
                return self._snapshot
            generation = self._generation

        settings = loader()

        with self._lock:
            if self._generation != generation:
                logger.debug("Maintenance reload discarded: a newer snapshot was set while loading")
                return self._snapshot
            self._replace(settings, self._clock())

        logger.debug(f"Maintenance snapshot refreshed: enabled={settings.is_enabled if settings else False}")
        return settings


maintenance_store = MaintenanceStore()
