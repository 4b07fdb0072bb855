"""
Tests for appointment package price lookup.
"""

import logging
from decimal import Decimal

import pytest

from petpulse_console.pricing import (
    PRICE_TABLE,
    UNRESOLVED,
    PriceResolver,
    _Unresolved,
    candidate_key,
    get_price,
    keyify,
    resolve_price,
)
from petpulse_console.schemas.appointment import Appointment

KNOWN_PACKAGES = [
    (service, key, price)
    for service, packages in PRICE_TABLE.items()
    for key, price in packages.items()
]


class TestKeyify:
    """Test cases for package name slugs."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Full Grooming", "full-grooming"),
            ("Basic  Bath & Brush", "basic-bath--brush"),
            ("nail-trim", "nail-trim"),
            ("Vaccination!", "vaccination"),
            ("Café Day", "caf-day"),
        ],
    )
    def test_keyify(self, name, expected):
        """Test lower-casing, hyphenating and stripping of names."""
        assert keyify(name) == expected

    def test_keyify_empty_values(self):
        """Test that missing names give an empty key."""
        assert keyify(None) == ""
        assert keyify("") == ""

    def test_candidate_key_field_order(self):
        """Test that packageId wins over the other package fields."""
        record = {
            "packageId": "premium-spa",
            "packageName": "Full Grooming",
            "title": "Something else",
        }
        assert candidate_key(record) == "premium-spa"

    def test_candidate_key_skips_empty_fields(self):
        """Test that blank fields fall through to the next candidate."""
        record = {"packageId": "", "packageName": None, "selectedService": "Vaccination"}
        assert candidate_key(record) == "vaccination"

    def test_candidate_key_reads_attributes(self):
        """Test that schema objects are read through snake_case attributes."""
        appointment = Appointment.model_validate(
            {"service": "daycare", "title": "Extended Day"}
        )
        assert candidate_key(appointment) == "extended-day"


class TestResolvePrice:
    """Test cases for resolving prices against the built-in table."""

    @pytest.mark.parametrize("service,key,price", KNOWN_PACKAGES)
    def test_known_packages_resolve_to_listed_price(self, service, key, price):
        """Test every table entry resolves to exactly its listed price."""
        assert resolve_price({"service": service, "packageId": key}) == Decimal(price)

    def test_display_name_resolves(self):
        """Test that a display name is slugified before lookup."""
        assert resolve_price(
            {"service": "Grooming", "packageName": "Full Grooming"}
        ) == Decimal("6500")

    @pytest.mark.parametrize(
        "record",
        [
            {"service": "boarding", "packageId": "full-day"},
            {"service": "grooming", "packageId": "full-day"},
            {"service": "vet"},
            {},
        ],
    )
    def test_unknown_pairs_are_unresolved(self, record):
        """Test that unknown services or packages give UNRESOLVED, not zero."""
        assert resolve_price(record) is UNRESOLVED

    def test_non_numeric_entry_is_unresolved(self):
        """Test that a non-numeric table entry counts as absent."""
        resolver = PriceResolver({"vet": {"checkup": "call us", "bad": None}})

        assert resolver.resolve_price({"service": "vet", "packageId": "checkup"}) is UNRESOLVED
        assert resolver.resolve_price({"service": "vet", "packageId": "bad"}) is UNRESOLVED

    def test_free_package_is_not_unresolved(self):
        """Test that a real zero price is distinguishable from a missing one."""
        resolver = PriceResolver({"vet": {"follow-up": 0}})

        price = resolver.resolve_price({"service": "vet", "packageId": "follow-up"})

        assert price is not UNRESOLVED
        assert price == Decimal("0")

    def test_appointment_objects_resolve(self):
        """Test resolving a parsed appointment."""
        appointment = Appointment.model_validate(
            {"service": "vet", "selectedService": "Emergency Care"}
        )
        assert resolve_price(appointment) == Decimal("15000")


class TestGetPrice:
    """Test cases for the zero-on-failure lookup."""

    def test_get_price_known(self):
        """Test that a known package returns its price."""
        assert get_price({"service": "daycare", "packageName": "Full Day"}) == Decimal(
            "5500"
        )

    def test_get_price_unknown_is_zero_and_warns(self, caplog):
        """Test that an unknown package gives zero and logs a warning."""
        with caplog.at_level(logging.WARNING, logger="petpulse_console.pricing"):
            price = get_price({"service": "grooming", "packageName": "Mystery Wash"})

        assert price == Decimal("0")
        assert "No price found" in caplog.text

    def test_get_price_never_raises(self):
        """Test that odd records degrade to zero instead of raising."""
        assert get_price({"service": None, "packageId": 42}) == Decimal("0")


class TestUnresolvedSentinel:
    """Test cases for the UNRESOLVED marker."""

    def test_sentinel_is_singleton(self):
        """Test that constructing the marker returns the shared instance."""
        assert _Unresolved() is UNRESOLVED

    def test_sentinel_is_falsy(self):
        """Test that the marker is falsy and has a readable repr."""
        assert not UNRESOLVED
        assert repr(UNRESOLVED) == "UNRESOLVED"


class TestPackages:
    """Test cases for listing a service's packages."""

    def test_packages_for_service(self):
        """Test listing known packages of a service."""
        packages = PriceResolver().packages("Daycare")

        assert packages == {
            "half-day": Decimal("3000"),
            "full-day": Decimal("5500"),
            "extended-day": Decimal("7000"),
        }

    def test_packages_skip_invalid_entries(self):
        """Test that non-numeric entries are left out."""
        resolver = PriceResolver({"vet": {"a": 100, "b": "n/a", "c": -5}})

        assert resolver.packages("vet") == {"a": Decimal("100")}

    def test_packages_unknown_service(self):
        """Test that an unknown service has no packages."""
        assert PriceResolver().packages("boarding") == {}
