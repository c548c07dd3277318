"""Progress sink posting playback sessions to a Jellyfin server."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import aiohttp

from .constants import DEFAULT_CLIENT_NAME, DEFAULT_CLIENT_VERSION
from .errors import ProgressReportError
from .models import ProgressReport

logger = logging.getLogger(__name__)

PATH_PLAYING = "/Sessions/Playing"
PATH_PROGRESS = "/Sessions/Playing/Progress"
PATH_STOPPED = "/Sessions/Playing/Stopped"

TokenProvider = Callable[[str], Awaitable[str | None]]


def authorization_header(
    client: str, device: str, device_id: str, version: str, token: str
) -> str:
    """Build the X-Emby-Authorization value identifying receiver and user."""
    fields = {
        "Client": client,
        "Device": device,
        "DeviceId": device_id,
        "Version": version,
        "Token": token,
    }
    return "MediaBrowser " + ", ".join(
        f'{key}="{value}"' for key, value in fields.items()
    )


def report_path(report: ProgressReport, is_final: bool) -> str:
    """Pick the sessions endpoint for a report."""
    if is_final:
        return PATH_STOPPED
    if report.event_name is None:
        return PATH_PLAYING
    return PATH_PROGRESS


class JellyfinProgressSink:
    """Sends progress reports on behalf of the user who queued the media.

    token_provider maps a user id to that user's access token; the receiver is
    announced as the playing device.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        *,
        client_name: str = DEFAULT_CLIENT_NAME,
        client_version: str = DEFAULT_CLIENT_VERSION,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the sink."""
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client_name = client_name
        self._client_version = client_version
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def report_progress(
        self,
        report: ProgressReport,
        user_id: str,
        receiver_name: str,
        receiver_id: str,
        is_final: bool = False,
    ) -> None:
        """Post report to the endpoint matching its kind."""
        token = await self._token_provider(user_id)
        if not token:
            logger.warning("No access token for user %s, progress not reported", user_id)
            return

        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        path = report_path(report, is_final)
        headers = {
            "X-Emby-Authorization": authorization_header(
                self._client_name, receiver_name, receiver_id, self._client_version, token
            )
        }
        payload = report.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            async with self._session.post(
                f"{self.base_url}{path}", json=payload, headers=headers
            ) as resp:
                if resp.status >= 400:
                    raise ProgressReportError(
                        f"{path} for item {report.item_id} returned HTTP {resp.status}"
                    )
                logger.debug("%s for %s: HTTP %d", path, report.item_id, resp.status)
        except aiohttp.ClientError as err:
            raise ProgressReportError(f"{path} for item {report.item_id} failed: {err}") from err

    async def close(self) -> None:
        """Close the HTTP session if this sink created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
