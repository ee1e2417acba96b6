"""Tests for version tags and release manifests."""

import itertools

import pydantic
import pytest

from reactor.errors import InvalidVersionError
from reactor.models import (
    CheckUpdateResult,
    LocalBuildEntry,
    PackageManifest,
    UpdateStatus,
    VersionTag,
)


class TestVersionTagParse:
    """Tests for VersionTag.parse()."""

    @pytest.mark.parametrize("value", ["0.0.0", "1.2.3", "10.20.30", "4294967295.0.1"])
    def test_round_trips(self, value: str) -> None:
        """Parsing then formatting returns the original string."""
        assert str(VersionTag.parse(value)) == value

    def test_components(self) -> None:
        """Components are parsed as integers."""
        tag = VersionTag.parse("1.22.333")
        assert (tag.major, tag.minor, tag.patch) == (1, 22, 333)

    @pytest.mark.parametrize(
        "value",
        ["", "1", "1.2", "1.2.x", "1.2.3.4", "a.b.c", "1..3", "-1.2.3", "1.2.3-beta", " 1.2.3", "1.2.+3", "4294967296.0.0"],
    )
    def test_rejects_malformed(self, value: str) -> None:
        """Malformed strings fail instead of defaulting."""
        with pytest.raises(InvalidVersionError):
            VersionTag.parse(value)

    def test_error_is_value_error(self) -> None:
        """InvalidVersionError can be handled as a ValueError."""
        with pytest.raises(ValueError):
            VersionTag.parse("1.2")

    def test_rejects_negative_components(self) -> None:
        """Direct construction validates components too."""
        with pytest.raises(InvalidVersionError):
            VersionTag(1, -1, 0)


class TestVersionTagOrdering:
    """Tests for VersionTag comparison."""

    def test_natural_order(self) -> None:
        """Components compare numerically, most significant first."""
        ordered = [VersionTag.parse(v) for v in ["1.2.3", "1.2.4", "1.3.0", "2.0.0"]]
        assert ordered == sorted(reversed(ordered))
        assert VersionTag.parse("1.2.3") < VersionTag.parse("1.2.4") < VersionTag.parse("1.3.0") < VersionTag.parse("2.0.0")

    def test_numeric_not_lexicographic(self) -> None:
        """10 sorts after 9."""
        assert VersionTag.parse("1.10.0") > VersionTag.parse("1.9.0")
        assert VersionTag.parse("0.0.10") > VersionTag.parse("0.0.9")

    def test_equality(self) -> None:
        """Tags are equal iff all components match."""
        assert VersionTag.parse("1.2.3") == VersionTag(1, 2, 3)
        assert VersionTag.parse("1.2.3") != VersionTag(1, 2, 4)
        assert hash(VersionTag(1, 2, 3)) == hash(VersionTag.parse("1.2.3"))

    def test_compare_is_consistent(self) -> None:
        """compare() agrees with the operators and is antisymmetric and transitive."""
        tags = [VersionTag(a, b, c) for a, b, c in itertools.product(range(3), repeat=3)]
        for left, right in itertools.product(tags, repeat=2):
            result = left.compare(right)
            assert result == -right.compare(left)
            assert (result < 0) == (left < right)
            assert (result == 0) == (left == right)
        for a, b, c in itertools.product(tags[::4], repeat=3):
            if a <= b and b <= c:
                assert a <= c

    def test_compare_self(self) -> None:
        """compare() is reflexive."""
        tag = VersionTag(3, 1, 4)
        assert tag.compare(tag) == 0

    def test_immutable(self) -> None:
        """Tags cannot be changed after construction."""
        tag = VersionTag(1, 0, 0)
        with pytest.raises(AttributeError):
            tag.major = 2  # type: ignore[misc]


class TestPackageManifest:
    """Tests for PackageManifest validation."""

    def test_wire_field_name(self) -> None:
        """The publisher's downloadUrl field is accepted."""
        manifest = PackageManifest.model_validate(
            {"version": "1.2.0", "hash": "abc", "downloadUrl": "https://example.com/app.zip"}
        )
        assert manifest.version == VersionTag(1, 2, 0)
        assert manifest.hash == "abc"
        assert manifest.download_url == "https://example.com/app.zip"

    def test_snake_case_field_name(self) -> None:
        """download_url is accepted as an alternate spelling."""
        manifest = PackageManifest.model_validate(
            {"version": "1.2.0", "hash": "abc", "download_url": "https://example.com/app.zip"}
        )
        assert manifest.download_url == "https://example.com/app.zip"

    def test_structured_version(self) -> None:
        """The version may be given as a component mapping."""
        manifest = PackageManifest.model_validate(
            {"version": {"major": 2, "minor": 0, "patch": 1}, "hash": "", "downloadUrl": "u"}
        )
        assert manifest.version == VersionTag(2, 0, 1)

    def test_invalid_version_rejected(self) -> None:
        """A malformed version fails validation."""
        with pytest.raises(pydantic.ValidationError):
            PackageManifest.model_validate({"version": "1.2", "hash": "", "downloadUrl": "u"})

    def test_missing_field_rejected(self) -> None:
        """All three fields are required."""
        with pytest.raises(pydantic.ValidationError):
            PackageManifest.model_validate({"version": "1.2.0", "hash": ""})

    def test_serializes_version_as_string(self) -> None:
        """Dumping by alias reproduces the wire format."""
        manifest = PackageManifest(version=VersionTag(1, 0, 0), hash="h", download_url="u")
        assert manifest.model_dump(by_alias=True) == {"version": "1.0.0", "hash": "h", "downloadUrl": "u"}

    def test_frozen(self) -> None:
        """Manifests are immutable."""
        manifest = PackageManifest(version=VersionTag(1, 0, 0), hash="h", download_url="u")
        with pytest.raises(pydantic.ValidationError):
            manifest.hash = "other"  # type: ignore[misc]


class TestResults:
    """Tests for LocalBuildEntry and CheckUpdateResult."""

    def test_build_entries_sort_by_version(self, tmp_path) -> None:
        """Entries order by version regardless of path."""
        entries = [
            LocalBuildEntry(VersionTag(1, 10, 0), tmp_path / "a"),
            LocalBuildEntry(VersionTag(1, 2, 0), tmp_path / "z"),
        ]
        assert [str(e.version) for e in sorted(entries)] == ["1.2.0", "1.10.0"]

    def test_check_result_properties(self) -> None:
        """update_available and latest_version reflect the status."""
        manifest = PackageManifest(version=VersionTag(2, 0, 0), hash="h", download_url="u")
        available = CheckUpdateResult(UpdateStatus.UPDATE_AVAILABLE, VersionTag(1, 0, 0), manifest)
        current = CheckUpdateResult(UpdateStatus.UP_TO_DATE, VersionTag(1, 0, 0))

        assert available.update_available
        assert available.latest_version == VersionTag(2, 0, 0)
        assert not current.update_available
        assert current.latest_version is None
