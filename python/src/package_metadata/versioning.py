"""
Package Versioning

This module provides the registry version type and the version selection policy.

NuGetVersion accepts Major.Minor[.Patch[.Revision]] with optional -prerelease
and +metadata parts. Prerelease ordering follows SemVer 2.0 and is delegated to
the semver library; the legacy fourth revision number is compared before the
release label.
"""

import re
from collections.abc import Iterable
from enum import Enum
from functools import total_ordering
from typing import TYPE_CHECKING

import semver

from .exceptions import InvalidRequestError

if TYPE_CHECKING:
    from .models import CandidateMetadata

_VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?(?:\.(?P<revision>\d+))?"
    r"(?:-(?P<release>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<metadata>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@total_ordering
class NuGetVersion:
    """A totally ordered package version as published by the registry."""

    __slots__ = ("major", "minor", "patch", "revision", "release", "metadata", "original", "_semver")

    def __init__(
        self,
        major: int,
        minor: int = 0,
        patch: int = 0,
        revision: int = 0,
        release: str | None = None,
        metadata: str | None = None,
        original: str | None = None,
    ):
        self.major = major
        self.minor = minor
        self.patch = patch
        self.revision = revision
        self.release = release or None
        self.metadata = metadata or None
        self.original = original
        # Release labels compare case-insensitively; build metadata never takes part.
        self._semver = semver.Version(
            major, minor, patch, prerelease=self.release.lower() if self.release else None
        )

    @classmethod
    def parse(cls, text: str) -> "NuGetVersion":
        """Parse a version string, raising ValueError when it is malformed."""
        if not isinstance(text, str):
            raise ValueError(f"Version must be a string, got {type(text).__name__}")

        match = _VERSION_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"'{text}' is not a valid version string")

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor") or 0),
            patch=int(match.group("patch") or 0),
            revision=int(match.group("revision") or 0),
            release=match.group("release"),
            metadata=match.group("metadata"),
            original=text.strip(),
        )

    @classmethod
    def try_parse(cls, text: str) -> "NuGetVersion | None":
        try:
            return cls.parse(text)
        except ValueError:
            return None

    @property
    def is_prerelease(self) -> bool:
        return self.release is not None

    @property
    def normalized(self) -> str:
        """Normalized form: three or four numeric parts plus the release label."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release:
            text += f"-{self.release}"
        return text

    def _core(self) -> tuple[int, int, int, int]:
        return (self.major, self.minor, self.patch, self.revision)

    def compare(self, other: "NuGetVersion") -> int:
        if self._core() != other._core():
            return -1 if self._core() < other._core() else 1
        return self._semver.compare(other._semver)

    def __eq__(self, other):
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other):
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self.compare(other) < 0

    def _release_key(self) -> tuple | None:
        """Release label parts as compared: numeric parts by value, the rest case-insensitively."""
        if not self.release:
            return None
        return tuple(int(part) if part.isdigit() else part.lower() for part in self.release.split("."))

    def __hash__(self):
        return hash((self._core(), self._release_key()))

    def __str__(self):
        return self.normalized

    def __repr__(self):
        return f"NuGetVersion('{self.normalized}')"


class FloatBehavior(str, Enum):
    """
    Eligibility rule applied when no exact version is requested.

    ABSOLUTE_LATEST matches the NuGet client FloatRange(AbsoluteLatest)
    selection, which accepts every version. PREFER_STABLE is the default and
    only falls back to prereleases when no stable version is published.
    """

    ABSOLUTE_LATEST = "absolute_latest"  # every version, prereleases included
    PREFER_STABLE = "prefer_stable"  # stable only, prereleases when nothing stable exists


def parse_requested_version(requested_version: str) -> NuGetVersion:
    """Parse a caller supplied version, mapping parse errors to InvalidRequestError."""
    try:
        return NuGetVersion.parse(requested_version)
    except ValueError as e:
        raise InvalidRequestError(f"Invalid package version '{requested_version}': {e}") from e


def select_version(
    candidates: Iterable["CandidateMetadata"],
    requested_version: "str | NuGetVersion | None" = None,
    float_behavior: FloatBehavior = FloatBehavior.PREFER_STABLE,
) -> "CandidateMetadata | None":
    """
    Select exactly one candidate, or None.

    With a requested version the first candidate whose version equals it is
    returned and the floating scan is skipped. Without one, the candidates are
    scanned keeping a running best: a candidate replaces the best only when it
    satisfies the float behavior and its version is strictly greater, so ties
    keep the earlier candidate.
    """
    candidates = list(candidates)

    if isinstance(requested_version, str) and requested_version.strip():
        requested_version = parse_requested_version(requested_version)
    if isinstance(requested_version, NuGetVersion):
        return next((c for c in candidates if c.version == requested_version), None)

    if float_behavior == FloatBehavior.ABSOLUTE_LATEST:
        def satisfies(version: NuGetVersion) -> bool:
            return True
    else:
        has_stable = any(not c.version.is_prerelease for c in candidates)

        def satisfies(version: NuGetVersion) -> bool:
            return not (has_stable and version.is_prerelease)

    best = None
    for candidate in candidates:
        if not satisfies(candidate.version):
            continue
        if best is None or candidate.version > best.version:
            best = candidate

    return best
