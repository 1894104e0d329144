"""Client for fetching object snapshots from the content source.

A snapshot is a JSON or YAML document with two top-level keys:

    objects: list of records, each with a reserved ``__metadata`` mapping
    models: list of content model descriptions (optional)

Snapshots are read from a local file or fetched over HTTP with requests.
HTTP errors are translated to the typed exceptions in ``errors``.
"""

import json
import logging
import os
from typing import Any, Optional
from urllib.parse import urlparse

import requests
import yaml
from requests.exceptions import ConnectionError, Timeout

from content_files.models.content_object import ContentModel, ContentObject, Snapshot
from .auth import Authenticator
from .errors import (
    InvalidCredentialsError,
    SnapshotFormatError,
    SourceAccessError,
    SourceUnreachableError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

# Seconds before an HTTP fetch is abandoned
REQUEST_TIMEOUT = 30


class SourceClient:
    """Loads the object set for a run.

    Example:
        >>> client = SourceClient()
        >>> snapshot = client.fetch("content.json")
        >>> print(f"{len(snapshot.objects)} object(s)")
    """

    def __init__(
        self,
        authenticator: Optional[Authenticator] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the source client.

        Args:
            authenticator: Authenticator for HTTP sources (created lazily)
            session: Optional requests session (for testing)
        """
        self._authenticator = authenticator
        self._session = session

    @staticmethod
    def is_remote(location: str) -> bool:
        return urlparse(location).scheme in ('http', 'https')

    def fetch(self, location: Optional[str] = None) -> Snapshot:
        """Fetch and parse a snapshot.

        Args:
            location: Local path or http(s) URL. Falls back to
                      CONTENT_SOURCE_URL when omitted.

        Returns:
            Parsed Snapshot

        Raises:
            InvalidCredentialsError: If no location is configured or the
                                     source rejects the token
            SourceUnreachableError: If the file or endpoint is unavailable
            SourceAccessError: For other HTTP failures
            SnapshotFormatError: If the document cannot be parsed
        """
        if not location:
            location = self._get_authenticator().get_source_url()
        if not location:
            raise InvalidCredentialsError(
                endpoint="unknown",
                reason="no object source configured (use --objects or CONTENT_SOURCE_URL)"
            )

        if self.is_remote(location):
            text = self._fetch_remote(location)
        else:
            text = self._read_local(location)

        data = self._parse(location, text)
        snapshot = self._build_snapshot(location, data)
        logger.info(
            f"Loaded {len(snapshot.objects)} object(s) and "
            f"{len(snapshot.models)} model(s) from {location}"
        )
        return snapshot

    def _get_authenticator(self) -> Authenticator:
        if self._authenticator is None:
            self._authenticator = Authenticator()
        return self._authenticator

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _read_local(self, path: str) -> str:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            raise SourceUnreachableError(endpoint=os.path.abspath(path))
        except OSError as e:
            raise SourceAccessError(f"Cannot read object snapshot {path}: {e}")

    def _fetch_remote(self, url: str) -> str:
        creds = self._get_authenticator().get_credentials(url)
        headers = {'Accept': 'application/json'}
        if creds.token:
            headers['Authorization'] = f"Bearer {creds.token}"

        def _get() -> requests.Response:
            response = self._get_session().get(url, headers=headers, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            return response

        try:
            response = retry_on_rate_limit(_get)
        except (ConnectionError, Timeout):
            raise SourceUnreachableError(endpoint=url)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (401, 403):
                raise InvalidCredentialsError(endpoint=url, reason=f"HTTP {status}")
            logger.error(f"Fetching {url} failed with HTTP {status}")
            raise SourceAccessError(f"Content source failure fetching {url} (HTTP {status})")

        return response.text

    @staticmethod
    def _parse(location: str, text: str) -> Any:
        """Parse JSON, falling back to YAML (a superset of JSON)."""
        lowered = location.lower()
        if not lowered.endswith(('.yml', '.yaml')):
            try:
                return json.loads(text)
            except json.JSONDecodeError:
                if lowered.endswith('.json'):
                    raise SnapshotFormatError(location, "invalid JSON")

        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SnapshotFormatError(location, f"invalid YAML: {e}")

    @staticmethod
    def _build_snapshot(location: str, data: Any) -> Snapshot:
        # A bare list is accepted as a list of objects
        if isinstance(data, list):
            data = {'objects': data}

        if not isinstance(data, dict):
            raise SnapshotFormatError(
                location,
                f"expected a mapping with 'objects', got {type(data).__name__}"
            )

        raw_objects = data.get('objects') or []
        raw_models = data.get('models') or []
        if not isinstance(raw_objects, list):
            raise SnapshotFormatError(location, "'objects' must be a list")
        if not isinstance(raw_models, list):
            raise SnapshotFormatError(location, "'models' must be a list")

        objects = []
        for index, raw in enumerate(raw_objects):
            if not isinstance(raw, dict):
                raise SnapshotFormatError(location, f"object at index {index} must be a mapping")
            objects.append(ContentObject.from_dict(raw))

        models = [ContentModel.from_dict(raw) for raw in raw_models if isinstance(raw, dict)]
        return Snapshot(objects=objects, models=models)
