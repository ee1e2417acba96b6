"""Data models shared by the update engine.

- VersionTag: comparable ``major.minor.patch`` version
- PackageManifest: the publisher's description of the latest release
- LocalBuildEntry: a versioned build found next to the running executable
- CheckUpdateResult: outcome of comparing the manifest with the local version
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Final

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator

from reactor.errors import InvalidVersionError

# Components are stored as unsigned 32-bit values on the publisher side
MAX_COMPONENT: Final = 2**32 - 1


@dataclass(frozen=True, order=True)
class VersionTag:
    """A three-component semantic version, ordered numerically."""

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        for component in (self.major, self.minor, self.patch):
            if (
                isinstance(component, bool)
                or not isinstance(component, int)
                or not 0 <= component <= MAX_COMPONENT
            ):
                raise InvalidVersionError(f"{self.major}.{self.minor}.{self.patch}")

    @classmethod
    def parse(cls, value: str) -> "VersionTag":
        """Parse a ``major.minor.patch`` string.

        Args:
            value: Dot-separated version with exactly three decimal components.

        Returns:
            The parsed VersionTag.

        Raises:
            InvalidVersionError: On fewer/more components or non-numeric parts.
        """
        parts = value.split(".")
        if len(parts) != 3:
            raise InvalidVersionError(value)
        numbers: list[int] = []
        for part in parts:
            if not part or not part.isascii() or not part.isdigit():
                raise InvalidVersionError(value)
            number = int(part)
            if number > MAX_COMPONENT:
                raise InvalidVersionError(value)
            numbers.append(number)
        return cls(*numbers)

    def compare(self, other: "VersionTag") -> int:
        """Return -1, 0 or 1 as this version is lower, equal or higher."""
        if self < other:
            return -1
        if self > other:
            return 1
        return 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def coerce_version(value: Any) -> VersionTag:
    """Build a VersionTag from a tag, a version string or a component mapping."""
    if isinstance(value, VersionTag):
        return value
    if isinstance(value, str):
        return VersionTag.parse(value.strip())
    if isinstance(value, dict):
        try:
            return VersionTag(value["major"], value["minor"], value["patch"])
        except KeyError as err:
            raise InvalidVersionError(str(value)) from err
    raise InvalidVersionError(str(value))


ManifestVersion = Annotated[
    VersionTag,
    PlainValidator(coerce_version),
    PlainSerializer(str, return_type=str),
]


class PackageManifest(BaseModel):
    """Release descriptor served by the publisher.

    The ``hash`` field is descriptive only; downloaded content is not
    checked against it. YAML reads unquoted digit-only hashes as numbers,
    so numeric values are accepted as their text.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    version: ManifestVersion
    hash: str
    download_url: str = Field(alias="downloadUrl")


@dataclass(frozen=True, order=True)
class LocalBuildEntry:
    """A sibling executable whose filename embeds a version."""

    version: VersionTag
    path: Path


class UpdateStatus(Enum):
    """Outcome of a remote update check."""

    UP_TO_DATE = "up_to_date"
    UPDATE_AVAILABLE = "update_available"


@dataclass(frozen=True)
class CheckUpdateResult:
    """Result of comparing the publisher's manifest with the running version."""

    status: UpdateStatus
    current_version: VersionTag
    manifest: PackageManifest | None = None

    @property
    def update_available(self) -> bool:
        return self.status is UpdateStatus.UPDATE_AVAILABLE

    @property
    def latest_version(self) -> VersionTag | None:
        return self.manifest.version if self.manifest is not None else None
