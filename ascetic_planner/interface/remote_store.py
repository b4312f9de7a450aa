"""Remote snapshot store over a JSONBin-style key-addressed HTTP API."""

import logging

import httpx
from pydantic import ValidationError

from ascetic_planner.core.config import Settings, constants, settings
from ascetic_planner.core.errors import RemoteIOError
from ascetic_planner.domain.snapshot import SyncSnapshot


logger = logging.getLogger(__name__)


class JsonBinSnapshotStore:
    """RemoteSnapshotPort holding one snapshot under a fixed bin ID.

    Every call is a single attempt; failures surface as RemoteIOError carrying
    the HTTP status when there is one.
    """

    def __init__(
        self,
        *,
        base_url: str,
        bin_id: str,
        master_key: str,
        timeout: float = constants.API_TIMEOUT_SECONDS,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/b/{bin_id}"
        self._master_key = master_key
        self._timeout = timeout

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "JsonBinSnapshotStore":
        """Build the store from settings, failing fast on missing credentials."""
        return cls(
            base_url=config.remote_base_url,
            bin_id=config.require_credential("remote_bin_id", "Remote snapshot bin"),
            master_key=config.require_credential("remote_master_key", "Remote snapshot master key"),
        )

    @property
    def url(self) -> str:
        return self._url

    async def put(self, snapshot: SyncSnapshot) -> None:
        """Overwrite the remote snapshot."""
        headers = {"Content-Type": "application/json", "X-Master-Key": self._master_key}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.put(self._url, json=snapshot.to_wire(), headers=headers)
        except httpx.HTTPError as e:
            logger.error("Snapshot upload failed: %s", e)
            raise RemoteIOError(f"Upload failed: {e!s}") from e

        if not response.is_success:
            logger.error("Snapshot upload rejected", extra={"status": response.status_code})
            raise RemoteIOError(f"Upload failed: {response.status_code}", status=response.status_code)

        logger.info("Snapshot uploaded", extra={"tasks": len(snapshot.tasks)})

    async def get(self) -> SyncSnapshot:
        """Fetch the remote snapshot, unwrapping the JSONBin "record" envelope."""
        headers = {"X-Master-Key": self._master_key}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._url, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Snapshot download failed: %s", e)
            raise RemoteIOError(f"Download failed: {e!s}") from e

        if not response.is_success:
            logger.error("Snapshot download rejected", extra={"status": response.status_code})
            raise RemoteIOError(f"Download failed: {response.status_code}", status=response.status_code)

        try:
            data = response.json()
            record = data.get("record", data) if isinstance(data, dict) else data
            snapshot = SyncSnapshot.model_validate(record)
        except (ValueError, ValidationError) as e:
            logger.error("Snapshot payload unreadable: %s", e)
            raise RemoteIOError(f"Download returned an unreadable snapshot: {e!s}") from e

        logger.info("Snapshot downloaded", extra={"tasks": len(snapshot.tasks)})
        return snapshot
