"""
Version Constraint Evaluation.

This module provides semantic-version constraint parsing and matching.

Key features:
- Wildcard, exact, caret (^), tilde (~) and comparison (>=, >, <=, <) constraints
- Component-wise numeric comparison (never string comparison)
- Non-raising satisfies() for resolver use
"""

import re
from dataclasses import dataclass

from blueprint.plugin.manifest import ValidationError

_CONSTRAINT_RE = re.compile(r"^(\^|~|>=|<=|==|=|>|<)?\s*(v?\d+(?:\.\d+)*)$")
_COMPONENT_RE = re.compile(r"^(\d+)")


def parse_version(version: str) -> tuple[int, ...] | None:
    """
    Parse a dotted version string into numeric components.

    Each component contributes its leading digits, so "1.0rc1" reads as (1, 0).
    A leading "v" is ignored.

    Args:
        version: Version string (e.g., "1.2.3")

    Returns:
        Tuple of integer components, or None if the string is not a version
    """
    if not isinstance(version, str):
        return None

    text = version.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    if not text:
        return None

    parts = []
    for component in text.split("."):
        match = _COMPONENT_RE.match(component)
        if not match:
            return None
        parts.append(int(match.group(1)))
    return tuple(parts)


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two version strings.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2

    Raises:
        ValidationError: If either string is not a version
    """
    parts1 = parse_version(v1)
    parts2 = parse_version(v2)
    if parts1 is None or parts2 is None:
        raise ValidationError(f"Cannot compare versions {v1!r} and {v2!r}")

    # Pad shorter version with zeros
    max_len = max(len(parts1), len(parts2))
    padded1 = parts1 + (0,) * (max_len - len(parts1))
    padded2 = parts2 + (0,) * (max_len - len(parts2))

    for p1, p2 in zip(padded1, padded2, strict=True):
        if p1 < p2:
            return -1
        elif p1 > p2:
            return 1
    return 0


@dataclass(frozen=True)
class VersionConstraint:
    """
    Represents a version constraint for dependencies.

    Attributes:
        operator: Constraint operator ("*", "==", "^", "~", ">=", ">", "<=", "<")
        version: Version string the operator applies to (empty for "*")
    """

    operator: str
    version: str = ""

    def matches(self, version: str) -> bool:
        """
        Check if a version satisfies this constraint.

        Args:
            version: Version string to check

        Returns:
            True if version satisfies constraint

        Raises:
            ValidationError: If the operator is unknown or version is malformed
        """
        if self.operator == "*":
            return True
        if self.operator == "==":
            return compare_versions(version, self.version) == 0
        elif self.operator == ">=":
            return compare_versions(version, self.version) >= 0
        elif self.operator == ">":
            return compare_versions(version, self.version) > 0
        elif self.operator == "<=":
            return compare_versions(version, self.version) <= 0
        elif self.operator == "<":
            return compare_versions(version, self.version) < 0
        elif self.operator == "^":
            return self._in_range(version, self._next_major())
        elif self.operator == "~":
            return self._in_range(version, self._next_minor())
        else:
            raise ValidationError(f"Unknown version operator: {self.operator}")

    def _in_range(self, version: str, upper_bound: str) -> bool:
        return (
            compare_versions(version, self.version) >= 0
            and compare_versions(version, upper_bound) < 0
        )

    def _next_major(self) -> str:
        # ^1.2 -> 2.0.0
        parts = parse_version(self.version) or (0,)
        return f"{parts[0] + 1}.0.0"

    def _next_minor(self) -> str:
        # ~1.2 -> 1.3.0, ~1 -> 1.1.0
        parts = parse_version(self.version) or (0,)
        minor = parts[1] if len(parts) > 1 else 0
        return f"{parts[0]}.{minor + 1}.0"

    def __str__(self) -> str:
        if self.operator == "*":
            return "*"
        if self.operator == "==":
            return self.version
        return f"{self.operator}{self.version}"


def parse_version_constraint(constraint_str: str) -> VersionConstraint:
    """
    Parse a version constraint string.

    Args:
        constraint_str: Constraint string (e.g., "^1.0", "~2.1", ">=1.0.0", "1.2.3", "*")

    Returns:
        VersionConstraint object

    Raises:
        ValidationError: If constraint string is invalid
    """
    if not isinstance(constraint_str, str):
        raise ValidationError(f"Invalid version constraint: {constraint_str!r}")

    text = constraint_str.strip()
    if text == "*":
        return VersionConstraint(operator="*")

    match = _CONSTRAINT_RE.match(text)
    if not match:
        raise ValidationError(
            f"Invalid version constraint: {constraint_str}. "
            f"Expected '*', a version, or operator + version (e.g., '^1.0')"
        )

    operator, version = match.groups()
    if operator in (None, "="):
        operator = "=="
    return VersionConstraint(operator=operator, version=version)


def satisfies(version: str, constraint: str) -> bool:
    """
    Check whether a concrete version satisfies a constraint expression.

    Malformed constraints and unparseable versions are treated as unsatisfied.

    Args:
        version: Concrete version string
        constraint: Constraint expression

    Returns:
        True if the constraint is satisfied
    """
    try:
        return parse_version_constraint(constraint).matches(version)
    except ValidationError:
        return False
