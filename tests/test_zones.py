"""Tests for zone recommendation and the framework catalog."""

import pytest

from tcof.core.plans.models import Stage
from tcof.core.plans.zones import (
    Scope,
    Uncertainty,
    Zone,
    calculate_zone,
    get_all_frameworks,
    get_framework_by_code,
    get_framework_description,
    get_frameworks_for_zone,
    get_zone_description,
)


class TestCalculateZone:
    """Test the scope x uncertainty table."""

    @pytest.mark.parametrize(
        ("scope", "uncertainty", "zone"),
        [
            ("Small", "Low", Zone.A),
            ("Small", "Medium", Zone.B),
            ("Small", "High", Zone.C),
            ("Medium", "Low", Zone.B),
            ("Medium", "Medium", Zone.C),
            ("Medium", "High", Zone.D),
            ("Large", "Low", Zone.C),
            ("Large", "Medium", Zone.D),
            ("Large", "High", Zone.E),
        ],
    )
    def test_table(self, scope: str, uncertainty: str, zone: Zone) -> None:
        assert calculate_zone(scope, uncertainty) == zone

    @pytest.mark.parametrize(
        ("scope", "uncertainty"),
        [(None, "Low"), ("Small", None), ("", "Low"), ("Huge", "Low"), ("Small", "low")],
    )
    def test_missing_or_unknown_input(self, scope, uncertainty) -> None:
        assert calculate_zone(scope, uncertainty) is None

    def test_zone_values_are_display_strings(self) -> None:
        assert calculate_zone("Large", "High").value == "Zone E"

    def test_enum_members_and_strings_agree(self) -> None:
        assert calculate_zone(Scope.MEDIUM, Uncertainty.HIGH) is calculate_zone("Medium", "High")
        assert get_frameworks_for_zone(Zone("Zone A")) == get_frameworks_for_zone("Zone A")


class TestZoneFrameworks:
    """Test per-zone recommendations."""

    def test_recommendations(self) -> None:
        assert get_frameworks_for_zone(Zone.A) == ["PRAXIS", "AGILEPM"]
        assert get_frameworks_for_zone("Zone B") == ["PRAXIS", "TEAL_BOOK", "AGILEPM"]
        assert get_frameworks_for_zone(Zone.C) == ["SAFe", "AGILEPM"]
        assert get_frameworks_for_zone(Zone.D) == ["SAFe"]
        assert get_frameworks_for_zone(Zone.E) == ["TEAL_BOOK"]

    def test_unknown_zone(self) -> None:
        assert get_frameworks_for_zone("Zone Z") == []
        assert get_frameworks_for_zone(None) == []

    def test_recommendation_is_a_copy(self) -> None:
        get_frameworks_for_zone(Zone.D).append("X")
        assert get_frameworks_for_zone(Zone.D) == ["SAFe"]

    def test_descriptions(self) -> None:
        assert get_zone_description(Zone.C).startswith("Agile zone")
        assert get_zone_description("nope") == ""


class TestFrameworkCatalog:
    """Test the built-in framework catalog."""

    def test_every_recommended_code_exists(self) -> None:
        for zone in Zone:
            for code in get_frameworks_for_zone(zone):
                assert get_framework_by_code(code) is not None

    def test_lookup(self) -> None:
        framework = get_framework_by_code("AGILEPM")
        assert framework is not None
        assert framework.name == "AgilePM"
        assert "Solution Architecture" in framework.tasks_for(Stage.DEFINITION)
        assert get_framework_by_code("NOPE") is None

    def test_descriptions(self) -> None:
        assert "Scaled Agile" in get_framework_description("SAFe")
        assert get_framework_description("NOPE") == ""

    def test_all_frameworks(self) -> None:
        codes = [f.code for f in get_all_frameworks()]
        assert codes == ["PRAXIS", "TEAL_BOOK", "SAFe", "AGILEPM"]
