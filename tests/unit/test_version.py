"""
Tests for Version Constraints.

This test suite covers:
1. Version parsing and comparison
2. Constraint parsing (valid/invalid)
3. Constraint matching per operator
4. satisfies() never raising
"""

import pytest

from blueprint.plugin.manifest import ValidationError
from blueprint.plugin.version import (
    VersionConstraint,
    compare_versions,
    parse_version,
    parse_version_constraint,
    satisfies,
)


class TestVersionParsing:
    """Test version parsing and comparison."""

    def test_parse_plain_version(self):
        """Should split a dotted version into integers."""
        assert parse_version("1.2.3") == (1, 2, 3)

    def test_parse_leading_v_and_suffix(self):
        """Should ignore a leading 'v' and trailing non-digits of a component."""
        assert parse_version("v2.0") == (2, 0)
        assert parse_version("1.0rc1") == (1, 0)

    def test_parse_invalid(self):
        """Should return None for strings that are not versions."""
        assert parse_version("") is None
        assert parse_version("abc") is None
        assert parse_version("1..2") is None

    def test_compare_is_numeric(self):
        """Should compare components numerically, not lexically."""
        assert compare_versions("1.10.0", "1.9.0") == 1
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("0.9", "1.0") == -1

    def test_compare_invalid_raises(self):
        """Should raise ValidationError for unparseable input."""
        with pytest.raises(ValidationError, match="Cannot compare"):
            compare_versions("one", "1.0")


class TestConstraintParsing:
    """Test constraint parsing."""

    def test_wildcard(self):
        """'*' should parse to the wildcard operator."""
        assert parse_version_constraint("*") == VersionConstraint("*")

    def test_bare_version_is_exact(self):
        """A bare version and '=' should both mean exact match."""
        assert parse_version_constraint("1.2.3").operator == "=="
        assert parse_version_constraint("=1.2.3").operator == "=="

    def test_operators(self):
        """Should recognise every operator, ignoring surrounding whitespace."""
        for text, operator in [
            ("^1.0", "^"),
            ("~1.2", "~"),
            (">=1.0.0", ">="),
            ("> 1.0", ">"),
            ("<=2.0", "<="),
            (" <3 ", "<"),
        ]:
            assert parse_version_constraint(text).operator == operator

    def test_invalid_constraints(self):
        """Should reject garbage and unsupported syntax."""
        for text in ["", "abc", "^", ">=1.0 <2.0", "1.x", "!=1.0"]:
            with pytest.raises(ValidationError, match="Invalid version constraint"):
                parse_version_constraint(text)

    def test_str_round_trip(self):
        """str() should render the canonical form."""
        assert str(parse_version_constraint("^1.0")) == "^1.0"
        assert str(parse_version_constraint("=1.2.3")) == "1.2.3"
        assert str(parse_version_constraint("*")) == "*"


class TestConstraintMatching:
    """Test constraint matching semantics."""

    @pytest.mark.parametrize(
        "version, constraint, expected",
        [
            ("1.5.2", "^1.0", True),
            ("2.0.0", "^1.0", False),
            ("1.1.0", "~1.0", False),
            ("1.0.5", "~1.0", True),
            ("7.3.1", "*", True),
        ],
    )
    def test_reference_table(self, version, constraint, expected):
        assert satisfies(version, constraint) is expected

    def test_wildcard_matches_anything(self):
        assert satisfies("0.0.1", "*")
        assert satisfies("99.0", "*")

    def test_exact_is_zero_padded(self):
        """Exact constraints should treat 1.2 and 1.2.0 as equal."""
        assert satisfies("1.2.0", "1.2")
        assert satisfies("1.2", "1.2.0")
        assert not satisfies("1.2.1", "1.2")

    def test_caret_bounds(self):
        """^X.Y should accept [X.Y.0, X+1.0.0)."""
        assert satisfies("1.0.0", "^1.0")
        assert satisfies("1.9.9", "^1.0")
        assert satisfies("1.5.0", "^1.2")
        assert not satisfies("2.0.0", "^1.0")
        assert not satisfies("1.1.9", "^1.2")

    def test_tilde_bounds(self):
        """~X.Y should accept [X.Y.0, X.Y+1.0)."""
        assert satisfies("1.2.0", "~1.2")
        assert satisfies("1.2.9", "~1.2")
        assert not satisfies("1.3.0", "~1.2")
        assert not satisfies("1.1.9", "~1.2")

    def test_comparisons(self):
        assert satisfies("1.0.0", ">=1.0.0")
        assert not satisfies("0.9.9", ">=1.0.0")
        assert satisfies("1.0.1", ">1.0.0")
        assert not satisfies("1.0.0", ">1.0.0")
        assert satisfies("2.0", "<=2.0.0")
        assert satisfies("1.9.9", "<2.0")
        assert not satisfies("2.0.0", "<2.0")

    def test_numeric_not_lexical(self):
        """1.10.0 should satisfy >=1.9.0."""
        assert satisfies("1.10.0", ">=1.9.0")
        assert satisfies("1.10.0", "^1.9")

    def test_malformed_input_is_unsatisfied(self):
        """satisfies() should return False instead of raising."""
        assert satisfies("1.0.0", "not-a-constraint") is False
        assert satisfies("garbage", "^1.0") is False
        assert satisfies("1.0.0", None) is False

    def test_matches_raises_for_bad_version(self):
        """VersionConstraint.matches() should raise for an unparseable version."""
        with pytest.raises(ValidationError):
            VersionConstraint("^", "1.0").matches("abc")
