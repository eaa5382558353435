"""Spotify Web API client used by the snapshot builder and the import executor.

Every call goes through SpotifyClient.request(), which injects the bearer
token, retries HTTP 429 answers (Retry-After or exponential backoff, bounded)
and turns other failures into RemoteApiError. List endpoints are paginated by
following `next` until exhausted, with an optional delay between pages; bulk
writes are chunked to Spotify's per-request limits.
"""

import time
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import requests

from spotbackup.config import SPOTIFY_API_BASE
from spotbackup.core import RateLimitExceeded, RemoteApiError, log_warning

MAX_ATTEMPTS = 5
MAX_BACKOFF_SECONDS = 30.0
BASE_BACKOFF_SECONDS = 0.5
REQUEST_TIMEOUT = 30

PAGE_LIMIT = 50
ADD_TRACKS_CHUNK = 100
SAVE_TRACKS_CHUNK = 50

ProgressCallback = Callable[[int, int], None]


def _chunks(values: Sequence[str], size: int) -> Iterator[List[str]]:
    for i in range(0, len(values), size):
        yield list(values[i : i + size])


def _error_message(r: requests.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return body.get("error_description") or error
    return r.reason or "unknown error"


def retry_delay(r: requests.Response, attempt: int) -> float:
    """Seconds to wait before retrying a 429 answer received on `attempt` (1-based)."""
    retry_after = r.headers.get("Retry-After")
    if retry_after:
        try:
            return max(0.0, float(int(retry_after)))
        except ValueError:
            pass
    return min(MAX_BACKOFF_SECONDS, BASE_BACKOFF_SECONDS * (2**attempt))


class SpotifyClient:
    """
    Thin, rate-limit aware wrapper around the Spotify Web API.

    - slowdown_ms : pause between pages and between bulk chunks
    - sleep       : injectable delay function (seconds), time.sleep by default
    """

    def __init__(
        self,
        access_token: str,
        *,
        slowdown_ms: float = 0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        max_attempts: int = MAX_ATTEMPTS,
        api_base: str = SPOTIFY_API_BASE,
    ) -> None:
        self._access_token = access_token
        self.slowdown_ms = slowdown_ms
        self.session = session or requests.Session()
        self._sleep = sleep
        self.max_attempts = max_attempts
        self.api_base = api_base.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith("http://") or path_or_url.startswith("https://"):
            return path_or_url
        return f"{self.api_base}/{path_or_url.lstrip('/')}"

    def _throttle(self) -> None:
        if self.slowdown_ms > 0:
            self._sleep(self.slowdown_ms / 1000.0)

    # --- Low level -----------------------------------------------------------

    def request(
        self,
        method: str,
        path_or_url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Optional[Dict]:
        """
        Perform one API call and return its parsed JSON body.

        204 and empty bodies return None. Raises RateLimitExceeded when every
        attempt was answered with 429, RemoteApiError on any other failure.
        """
        url = self._url(path_or_url)

        for attempt in range(1, self.max_attempts + 1):
            try:
                r = self.session.request(
                    method,
                    url,
                    headers=self._headers(),
                    params=params,
                    json=json,
                    timeout=REQUEST_TIMEOUT,
                )
            except requests.RequestException as e:
                raise RemoteApiError(f"Spotify API request failed: {method} {url}: {e}") from e

            if r.status_code == 429:
                if attempt < self.max_attempts:
                    delay = retry_delay(r, attempt)
                    log_warning(
                        f"Rate limited on {method} {url} (attempt {attempt}/{self.max_attempts}). "
                        f"Retrying in {delay:.1f}s"
                    )
                    self._sleep(delay)
                continue

            if not r.ok:
                raise RemoteApiError(
                    f"Spotify API Error: {r.status_code} {_error_message(r)}",
                    status_code=r.status_code,
                )

            if r.status_code == 204 or not r.content:
                return None

            try:
                return r.json()
            except ValueError as e:
                raise RemoteApiError(
                    f"Spotify API returned invalid JSON for {method} {url}",
                    status_code=r.status_code,
                ) from e

        raise RateLimitExceeded(
            f"Max retry attempts exceeded for {method} {url}",
            status_code=429,
        )

    def iter_pages(
        self,
        path_or_url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Iterator[List[Dict]]:
        """
        Yield the `items` of every page, following `next` until exhausted.

        on_progress(count, total) is called after each page with the number of
        items seen so far and the total announced by Spotify.
        """
        url: Optional[str] = path_or_url
        count = 0

        while url:
            data = self.request("GET", url, params=params)
            if not data:
                break
            # next URL already includes params
            params = None

            items = data.get("items") or []
            count += len(items)
            total = data.get("total") or count
            yield items

            if on_progress:
                on_progress(count, total)

            url = data.get("next")
            if url:
                self._throttle()

    # --- Read endpoints ------------------------------------------------------

    def get_profile(self) -> Dict:
        return self.request("GET", "me") or {}

    def get_my_playlists(
        self, user_id: str, on_progress: Optional[ProgressCallback] = None
    ) -> List[Dict]:
        """
        Return {id, name, href} stubs for the user's playlists.

        `href` points to the playlist's tracks endpoint and is resolved by
        the snapshot builder.
        """
        playlists: List[Dict] = []
        for items in self.iter_pages(
            f"users/{user_id}/playlists",
            params={"limit": PAGE_LIMIT},
            on_progress=on_progress,
        ):
            for p in items:
                if not p or not p.get("id"):
                    continue
                tracks_ref = p.get("tracks") or {}
                playlists.append(
                    {
                        "id": p["id"],
                        "name": p.get("name"),
                        "href": tracks_ref.get("href")
                        or f"{self.api_base}/playlists/{p['id']}/tracks",
                    }
                )
        return playlists

    def _collect_tracks(
        self,
        path_or_url: str,
        params: Optional[Dict[str, Any]],
        on_progress: Optional[ProgressCallback],
    ) -> List[Dict]:
        tracks: List[Dict] = []
        for items in self.iter_pages(path_or_url, params=params, on_progress=on_progress):
            for item in items:
                # Removed or unavailable tracks come back as null
                t = (item or {}).get("track")
                if not t:
                    continue
                tracks.append({"id": t.get("id"), "uri": t.get("uri")})
        return tracks

    def get_playlist_tracks(
        self, href: str, on_progress: Optional[ProgressCallback] = None
    ) -> List[Dict]:
        return self._collect_tracks(href, None, on_progress)

    def get_my_tracks(self, on_progress: Optional[ProgressCallback] = None) -> List[Dict]:
        return self._collect_tracks("me/tracks", {"limit": PAGE_LIMIT}, on_progress)

    # --- Write endpoints -----------------------------------------------------

    def create_playlist(self, user_id: str, name: str, public: bool = False) -> Dict:
        playlist = self.request(
            "POST",
            f"users/{user_id}/playlists",
            json={"name": name, "public": public},
        )
        if not playlist or not playlist.get("id"):
            raise RemoteApiError(f"Spotify did not return the created playlist {name!r}")
        return playlist

    def add_tracks_to_playlist(self, playlist_id: str, uris: Sequence[str]) -> int:
        """Add uris in batches of 100. Returns the number of requests issued."""
        calls = 0
        for batch in _chunks(uris, ADD_TRACKS_CHUNK):
            if calls:
                self._throttle()
            self.request("POST", f"playlists/{playlist_id}/tracks", json={"uris": batch})
            calls += 1
        return calls

    def save_tracks(self, ids: Sequence[str]) -> int:
        """Save track ids to the library in batches of 50. Returns the number of requests issued."""
        calls = 0
        for batch in _chunks(ids, SAVE_TRACKS_CHUNK):
            if calls:
                self._throttle()
            self.request("PUT", "me/tracks", json={"ids": batch})
            calls += 1
        return calls
