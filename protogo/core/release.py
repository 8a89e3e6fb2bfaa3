"""
GitHub release API client.

This module resolves the latest release tag of an upstream project and
downloads release assets. Every request carries the same header set:
- Authorization: Bearer <token> (only when a token is configured)
- User-Agent identifying protogo
- X-GitHub-Api-Version pinned to a fixed API version
- Accept selecting either raw binary or JSON metadata

Requests are never retried; a single failure is reported to the caller.
"""

import logging
from pathlib import Path
from typing import Optional

import requests
from requests.exceptions import RequestException

from protogo.core.exceptions import (
    InstallError,
    ReleaseMetadataError,
    ReleaseRequestError,
)

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"
GITHUB_AGENT_NAME = "Protogo App"
ACCEPT_BINARY = "application/octet-stream"
ACCEPT_JSON = "application/vnd.github+json"

DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 8192


class GitHubReleaseClient:
    """
    Minimal client for GitHub release listings and release assets.

    Attributes:
        token: Optional bearer token for authenticated requests
        timeout: Request timeout in seconds
        session: requests session used to send requests
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize release client.

        Args:
            token: GitHub token; requests are unauthenticated when None
            timeout: Request timeout in seconds
            session: Optional requests session (a new one is created if None)
        """
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_headers(self, binary: bool = False) -> dict:
        """
        Build request headers for the GitHub API.

        Args:
            binary: True when a raw binary payload is expected

        Returns:
            Header dictionary
        """
        headers = {
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": GITHUB_AGENT_NAME,
            "Accept": ACCEPT_BINARY if binary else ACCEPT_JSON,
        }

        if self.token:
            logger.debug("GitHub API authorization token set!")
            headers["Authorization"] = f"Bearer {self.token}"
        else:
            logger.debug("GitHub API authorization token not set!")

        return headers

    def get(
        self, url: str, binary: bool = False, stream: bool = False
    ) -> requests.Response:
        """
        Make GET request to GitHub.

        Args:
            url: URL to request
            binary: True when a raw binary payload is expected
            stream: Stream the response body instead of loading it

        Returns:
            Response with a successful status code

        Raises:
            ReleaseRequestError: On transport failure or non-2xx status
        """
        try:
            response = self.session.get(
                url,
                headers=self.build_headers(binary),
                stream=stream,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except RequestException as e:
            raise ReleaseRequestError(url, str(e)) from e

        try:
            response.raise_for_status()
        except RequestException as e:
            response.close()
            raise ReleaseRequestError(url, str(e)) from e

        return response

    def fetch_latest_tag(self, url: str) -> str:
        """
        Get the tag of the latest release from a release listing endpoint.

        The tag is returned exactly as published, including any 'v' prefix.

        Args:
            url: Release listing URL (e.g., .../releases/latest)

        Returns:
            Release tag name

        Raises:
            ReleaseRequestError: If the request fails
            ReleaseMetadataError: If the body is not a JSON object with a
                string 'tag_name' field

        Example:
            >>> client = GitHubReleaseClient()
            >>> client.fetch_latest_tag(
            ...     "https://api.github.com/repos/google/flatbuffers/releases/latest"
            ... )
            'v25.2.10'
        """
        logger.debug(f"Downloading latest release info: {url}")
        response = self.get(url, binary=False)

        logger.debug("Decoding latest release JSON...")
        try:
            document = response.json()
        except ValueError as e:
            raise ReleaseMetadataError(
                f"Latest release info from {url} parsing error: {e}"
            ) from e

        if not isinstance(document, dict):
            raise ReleaseMetadataError(
                f"Latest release info from {url} is not a JSON object, but: {document!r}"
            )

        if "tag_name" not in document:
            raise ReleaseMetadataError(
                f"Latest release info 'tag_name' not found in: {document}"
            )

        tag = document["tag_name"]
        if not isinstance(tag, str):
            raise ReleaseMetadataError(
                f"Latest release info 'tag_name' field is not string, but: {tag!r}"
            )

        logger.debug(f"Latest release tag: {tag}")
        return tag

    def download(self, url: str, destination: Path) -> int:
        """
        Stream a release asset to a file.

        Args:
            url: Asset download URL
            destination: File to write; created or truncated

        Returns:
            Number of bytes written

        Raises:
            ReleaseRequestError: If the request fails
            InstallError: If the file cannot be written
        """
        logger.debug(f"Downloading release asset: {url}")
        response = self.get(url, binary=True, stream=True)

        written = 0
        try:
            with response, open(destination, "wb") as out:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        out.write(chunk)
                        written += len(chunk)
        except OSError as e:
            raise InstallError(f"Creating file '{destination}' error: {e}") from e
        except RequestException as e:
            raise ReleaseRequestError(url, str(e)) from e

        logger.debug(f"Downloaded file '{destination.name}' {written} bytes successfully!")
        return written


__all__ = [
    "GitHubReleaseClient",
    "GITHUB_API_VERSION",
    "GITHUB_AGENT_NAME",
    "ACCEPT_BINARY",
    "ACCEPT_JSON",
]
