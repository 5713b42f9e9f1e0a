"""
Unit tests for AppointmentTypeCatalog.
"""

from datetime import time

import pytest

from clinic_scheduling.domains.appointments.domain.value_objects import (
    DEFAULT_PROFILES,
    AppointmentTypeCatalog,
    AppointmentTypeProfile,
    OperatingWindow,
)


@pytest.mark.unit
class TestResolve:
    def test_canonical_name(self, catalog):
        assert catalog.resolve("surgery").duration_minutes == 120

    def test_case_and_whitespace_insensitive(self, catalog):
        assert catalog.resolve("  Vaccination ").name == "vaccination"

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("vacunacion", "vaccination"),
            ("Vacunación", "vaccination"),
            ("cirugía", "surgery"),
            ("peluqueria", "grooming"),
            ("urgencia", "emergency"),
            ("control", "checkup"),
            ("desparacitacion", "deworming"),
            ("consulta general", "general consultation"),
        ],
    )
    def test_aliases(self, catalog, label, expected):
        assert catalog.resolve(label).name == expected

    def test_unknown_and_empty_labels(self, catalog):
        assert catalog.resolve("acupuncture") is None
        assert catalog.resolve("") is None
        assert catalog.resolve(None) is None


@pytest.mark.unit
class TestDurations:
    @pytest.mark.parametrize(
        "label,minutes",
        [
            ("general consultation", 30),
            ("vaccination", 20),
            ("emergency", 60),
            ("surgery", 120),
            ("grooming", 45),
            ("checkup", 20),
            ("deworming", 15),
        ],
    )
    def test_default_durations(self, catalog, label, minutes):
        assert catalog.duration_for(label) == minutes

    def test_unknown_type_uses_default_duration(self, catalog):
        assert catalog.duration_for("acupuncture") == 30

    def test_custom_default_duration(self):
        catalog = AppointmentTypeCatalog(DEFAULT_PROFILES, time(7, 0), time(17, 0), default_duration_minutes=25)

        assert catalog.duration_for(None) == 25


@pytest.mark.unit
class TestWindows:
    def test_vaccination_has_two_windows(self, catalog):
        windows = catalog.windows_for("vaccination")

        assert windows == (
            OperatingWindow(time(8, 0), time(12, 30)),
            OperatingWindow(time(14, 0), time(17, 0)),
        )

    def test_profile_without_windows_uses_clinic_hours(self, catalog):
        assert catalog.windows_for("general consultation") == (catalog.clinic_window,)

    def test_unknown_type_uses_clinic_hours(self, catalog):
        assert catalog.windows_for("acupuncture") == (OperatingWindow(time(7, 0), time(17, 0)),)

    def test_windows_are_clipped_to_clinic_hours(self):
        catalog = AppointmentTypeCatalog(DEFAULT_PROFILES, time(9, 0), time(16, 30))

        assert catalog.windows_for("surgery") == (OperatingWindow(time(9, 0), time(12, 0)),)
        assert catalog.windows_for("vaccination") == (
            OperatingWindow(time(9, 0), time(12, 30)),
            OperatingWindow(time(14, 0), time(16, 30)),
        )

    def test_window_outside_clinic_hours_is_dropped(self):
        profiles = (
            AppointmentTypeProfile(
                "late",
                20,
                (OperatingWindow(time(18, 0), time(20, 0)), OperatingWindow(time(8, 0), time(9, 0))),
            ),
        )
        catalog = AppointmentTypeCatalog(profiles, time(7, 0), time(17, 0))

        assert catalog.windows_for("late") == (OperatingWindow(time(8, 0), time(9, 0)),)

    def test_windows_sorted_by_open_time(self):
        profiles = (
            AppointmentTypeProfile(
                "split",
                20,
                (OperatingWindow(time(14, 0), time(15, 0)), OperatingWindow(time(8, 0), time(9, 0))),
            ),
        )
        catalog = AppointmentTypeCatalog(profiles, time(7, 0), time(17, 0))

        assert [w.open_time for w in catalog.windows_for("split")] == [time(8, 0), time(14, 0)]


@pytest.mark.unit
class TestValidation:
    def test_window_must_close_after_opening(self):
        with pytest.raises(ValueError):
            OperatingWindow(time(12, 0), time(12, 0))

    def test_profile_needs_positive_duration(self):
        with pytest.raises(ValueError):
            AppointmentTypeProfile("broken", 0)

    def test_clinic_hours_must_be_ordered(self):
        with pytest.raises(ValueError):
            AppointmentTypeCatalog(DEFAULT_PROFILES, time(17, 0), time(7, 0))
