"""Remote update checking against the publisher's manifest endpoint."""

import logging

import httpx
import pydantic
import yaml

from reactor.config import ReactorConfig
from reactor.errors import ManifestParseError, NetworkError
from reactor.models import CheckUpdateResult, PackageManifest, UpdateStatus, VersionTag
from reactor.transport import client_session

logger = logging.getLogger(__name__)


def parse_manifest(body: str) -> PackageManifest:
    """Parse a manifest body.

    The publisher may serve YAML or JSON; JSON documents are valid YAML, so
    a single loader handles both.

    Raises:
        ManifestParseError: If the body is not a mapping with the expected fields.
    """
    try:
        data = yaml.safe_load(body)
    except yaml.YAMLError as err:
        raise ManifestParseError(f"malformed document: {err}") from err
    if not isinstance(data, dict):
        raise ManifestParseError("expected a mapping with version, hash and downloadUrl")
    try:
        return PackageManifest.model_validate(data)
    except pydantic.ValidationError as err:
        raise ManifestParseError(str(err)) from err


class RemoteUpdateChecker:
    """Compare the running version with the latest published manifest."""

    def __init__(
        self,
        current_version: VersionTag,
        publishing_url: str,
        client: httpx.Client | None = None,
        config: ReactorConfig | None = None,
    ):
        self.current_version = current_version
        self.publishing_url = publishing_url
        self._client = client
        self._config = config or ReactorConfig()

    def fetch_manifest(self) -> PackageManifest:
        """Fetch and parse the publisher's manifest.

        Raises:
            NetworkError: On transport failures or a non-success status.
            ManifestParseError: If the response body is not a valid manifest.
        """
        logger.debug("Fetching release manifest from %s", self.publishing_url)
        try:
            with client_session(self._client, self._config) as client:
                response = client.get(self.publishing_url)
        except httpx.HTTPError as err:
            raise NetworkError(f"{type(err).__name__}: {err}") from err

        if not response.is_success:
            raise NetworkError(
                f"request failed with status: {response.status_code}",
                status_code=response.status_code,
            )
        manifest = parse_manifest(response.text)
        logger.debug("Publisher reports version %s (hash=%s)", manifest.version, manifest.hash)
        return manifest

    def get_latest_version(self) -> VersionTag:
        return self.fetch_manifest().version

    def check_update(self) -> CheckUpdateResult:
        """Report whether the publisher has a strictly newer version."""
        manifest = self.fetch_manifest()
        if manifest.version > self.current_version:
            logger.info("Update available: %s -> %s", self.current_version, manifest.version)
            return CheckUpdateResult(
                status=UpdateStatus.UPDATE_AVAILABLE,
                current_version=self.current_version,
                manifest=manifest,
            )
        return CheckUpdateResult(status=UpdateStatus.UP_TO_DATE, current_version=self.current_version)
