"""Tests for name constraint conversion."""

import pytest

from certgen.utils.name_constraints import build_name_constraints, name_to_constraint, names_to_constraints


@pytest.mark.unit
class TestNameToConstraint:
    """Test conversion of single names."""

    def test_dns_name(self):
        assert name_to_constraint("example.com") == "DNS:example.com"

    def test_ipv4_gets_exact_mask(self):
        assert name_to_constraint("192.168.0.1") == "IP:192.168.0.1/255.255.255.255"

    def test_typed_name_passes_through(self):
        assert name_to_constraint("IP:10.0.0.0/255.0.0.0") == "IP:10.0.0.0/255.0.0.0"
        assert name_to_constraint("email:.example.com") == "email:.example.com"

    def test_ipv6_is_not_inferred(self):
        # no colon-free type prefix and not a dotted quad, so it is a DNS name
        assert name_to_constraint("::1").startswith("DNS:")

    def test_partial_dotted_quad_is_dns(self):
        assert name_to_constraint("10.0.0") == "DNS:10.0.0"


@pytest.mark.unit
class TestBuildNameConstraints:
    """Test the full nameConstraints value."""

    def test_names_joined_with_keyword(self):
        result = names_to_constraints(["example.com", "8.8.8.8"], "permitted")
        assert result == "permitted;DNS:example.com,permitted;IP:8.8.8.8/255.255.255.255"

    def test_permitted_and_excluded(self):
        result = build_name_constraints(["example.com"], ["bad.example.com"])
        assert result == "critical,permitted;DNS:example.com,excluded;DNS:bad.example.com"

    def test_excluded_only(self):
        assert build_name_constraints([], ["bad.example.com"]) == "critical,excluded;DNS:bad.example.com"

    def test_not_critical(self):
        assert build_name_constraints(["example.com"], [], critical=False) == "permitted;DNS:example.com"

    def test_empty_lists(self):
        assert build_name_constraints([], []) == ""
