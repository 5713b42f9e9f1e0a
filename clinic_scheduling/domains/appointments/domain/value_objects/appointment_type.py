"""
Appointment Type Catalog

Immutable mapping from appointment-type label to default duration and the
time-of-day windows in which that type may be booked.
"""

from dataclasses import dataclass, field
from datetime import time
from functools import lru_cache

from clinic_scheduling.config.settings import get_settings
from clinic_scheduling.core.domain import ValueObject

UNKNOWN_TYPE_DURATION_MINUTES = 30


@dataclass(frozen=True)
class OperatingWindow(ValueObject):
    """Time-of-day range [open_time, close_time) in which bookings may start and end."""

    open_time: time
    close_time: time

    def _validate(self) -> None:
        if self.close_time <= self.open_time:
            raise ValueError(f"Window close {self.close_time} must be after open {self.open_time}")

    def clip(self, open_time: time, close_time: time) -> "OperatingWindow | None":
        """Intersect with [open_time, close_time); None when nothing remains."""
        start = max(self.open_time, open_time)
        end = min(self.close_time, close_time)
        if end <= start:
            return None
        return OperatingWindow(start, end)


@dataclass(frozen=True)
class AppointmentTypeProfile(ValueObject):
    """Default duration and booking windows for one appointment type.

    An empty ``windows`` tuple means the type may be booked any time the
    clinic is open.
    """

    name: str
    duration_minutes: int
    windows: tuple[OperatingWindow, ...] = ()
    aliases: tuple[str, ...] = field(default=())

    def _validate(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError(f"Profile '{self.name}' needs a positive duration")

    def matches(self, label: str) -> bool:
        key = label.strip().lower()
        return key == self.name.lower() or key in (alias.lower() for alias in self.aliases)


DEFAULT_PROFILES: tuple[AppointmentTypeProfile, ...] = (
    AppointmentTypeProfile("general consultation", 30, (), ("consulta general",)),
    AppointmentTypeProfile(
        "vaccination",
        20,
        (OperatingWindow(time(8, 0), time(12, 30)), OperatingWindow(time(14, 0), time(17, 0))),
        ("vacunacion", "vacunación"),
    ),
    AppointmentTypeProfile("emergency", 60, (OperatingWindow(time(7, 0), time(17, 0)),), ("urgencia",)),
    AppointmentTypeProfile("surgery", 120, (OperatingWindow(time(8, 0), time(12, 0)),), ("cirugia", "cirugía")),
    AppointmentTypeProfile("grooming", 45, (OperatingWindow(time(9, 0), time(16, 0)),), ("peluqueria", "peluquería")),
    AppointmentTypeProfile("checkup", 20, (OperatingWindow(time(7, 0), time(17, 0)),), ("control",)),
    AppointmentTypeProfile(
        "deworming",
        15,
        (OperatingWindow(time(7, 0), time(17, 0)),),
        ("desparacitacion", "desparasitacion", "desparasitación"),
    ),
)


class AppointmentTypeCatalog:
    """
    Lookup of appointment-type profiles by label.

    Labels are matched case-insensitively against canonical names and aliases.
    Windows are clipped to the clinic hours once, at construction.

    Example:
        ```python
        catalog = AppointmentTypeCatalog(DEFAULT_PROFILES, time(7, 0), time(17, 0))
        catalog.duration_for("Vacunacion")  # 20
        catalog.windows_for("surgery")  # (OperatingWindow(08:00, 12:00),)
        ```
    """

    def __init__(
        self,
        profiles: tuple[AppointmentTypeProfile, ...],
        clinic_open: time,
        clinic_close: time,
        default_duration_minutes: int = UNKNOWN_TYPE_DURATION_MINUTES,
    ):
        self._clinic_window = OperatingWindow(clinic_open, clinic_close)
        self._default_duration = default_duration_minutes
        self._profiles = tuple(profiles)
        self._windows: dict[str, tuple[OperatingWindow, ...]] = {}
        for profile in self._profiles:
            self._windows[profile.name] = self._clip_all(profile.windows)

    def _clip_all(self, windows: tuple[OperatingWindow, ...]) -> tuple[OperatingWindow, ...]:
        if not windows:
            return (self._clinic_window,)
        clipped = (w.clip(self._clinic_window.open_time, self._clinic_window.close_time) for w in windows)
        return tuple(sorted((w for w in clipped if w is not None), key=lambda w: w.open_time))

    @property
    def clinic_window(self) -> OperatingWindow:
        return self._clinic_window

    def resolve(self, appointment_type: str | None) -> AppointmentTypeProfile | None:
        """Return the profile matching the label, or None."""
        if not appointment_type:
            return None
        for profile in self._profiles:
            if profile.matches(appointment_type):
                return profile
        return None

    def duration_for(self, appointment_type: str | None) -> int:
        profile = self.resolve(appointment_type)
        return profile.duration_minutes if profile else self._default_duration

    def windows_for(self, appointment_type: str | None) -> tuple[OperatingWindow, ...]:
        profile = self.resolve(appointment_type)
        if profile is None:
            return (self._clinic_window,)
        return self._windows[profile.name]

    def profiles(self) -> tuple[AppointmentTypeProfile, ...]:
        return self._profiles


def build_default_catalog() -> AppointmentTypeCatalog:
    """Build the catalog from the configured clinic hours."""
    settings = get_settings()
    return AppointmentTypeCatalog(
        DEFAULT_PROFILES,
        settings.CLINIC_OPEN_TIME,
        settings.CLINIC_CLOSE_TIME,
        settings.DEFAULT_DURATION_MINUTES,
    )


@lru_cache(maxsize=1)
def get_catalog() -> AppointmentTypeCatalog:
    """Process-wide catalog, built on first use."""
    return build_default_catalog()
