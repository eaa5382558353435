import json as jsonlib
from typing import Any, Callable, Dict, List, Optional

import pytest
from requests.structures import CaseInsensitiveDict

from spotbackup.config import build_config
from spotbackup.core import RemoteApiError


def track_id(n: int) -> str:
    """A valid 22-char base62 id, unique per n."""
    return f"{n:0>22}"


def track_uri(n: int) -> str:
    return f"spotify:track:{track_id(n)}"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        text: Optional[str] = None,
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})
        self.reason = reason
        if text is not None:
            self.text = text
        elif body is not None:
            self.text = jsonlib.dumps(body)
        else:
            self.text = ""
        self.content = self.text.encode("utf-8")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return jsonlib.loads(self.text)


class FakeSession:
    """
    Stand-in for requests.Session.

    Responses are served in order from `responses`; every call is recorded.
    """

    def __init__(self, responses: Optional[List[FakeResponse]] = None) -> None:
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return self.responses.pop(0)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("POST", url, **kwargs)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class FixedRandomSource:
    """Returns `n` copies of the same byte, like a mocked randomBytes."""

    def __init__(self, byte: bytes = b"a") -> None:
        self.byte = byte
        self.calls: List[int] = []

    def token_bytes(self, n: int) -> bytes:
        self.calls.append(n)
        return self.byte * n


class FakeSpotifyClient:
    """
    In-memory Spotify account implementing the SpotifyClient operations.

    fail_on maps an operation name to the 1-based call number that raises
    RemoteApiError.
    """

    def __init__(
        self,
        user_id: str = "user1",
        playlists: Optional[Dict[str, Dict[str, Any]]] = None,
        saved: Optional[List[Dict[str, str]]] = None,
        fail_on: Optional[Dict[str, int]] = None,
    ) -> None:
        self.user_id = user_id
        self.playlists: Dict[str, Dict[str, Any]] = playlists or {}
        self.saved: List[Dict[str, str]] = saved or []
        self.fail_on = fail_on or {}
        self.calls: List[tuple] = []
        self._counts: Dict[str, int] = {}
        self._next_id = 0

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        self._counts[name] = self._counts.get(name, 0) + 1
        if self.fail_on.get(name) == self._counts[name]:
            raise RemoteApiError(f"Spotify API Error: 500 {name} failed", status_code=500)

    def get_profile(self) -> Dict:
        self._record("get_profile")
        return {"id": self.user_id}

    def get_my_playlists(self, user_id: str, on_progress: Optional[Callable] = None) -> List[Dict]:
        self._record("get_my_playlists", user_id)
        stubs = [
            {"id": pid, "name": p["name"], "href": f"href:{pid}"}
            for pid, p in self.playlists.items()
        ]
        if on_progress:
            on_progress(len(stubs), len(stubs))
        return stubs

    def get_playlist_tracks(self, href: str, on_progress: Optional[Callable] = None) -> List[Dict]:
        self._record("get_playlist_tracks", href)
        tracks = list(self.playlists[href.split(":", 1)[1]]["tracks"])
        if on_progress:
            on_progress(len(tracks), len(tracks))
        return tracks

    def get_my_tracks(self, on_progress: Optional[Callable] = None) -> List[Dict]:
        self._record("get_my_tracks")
        if on_progress:
            on_progress(len(self.saved), len(self.saved))
        return list(self.saved)

    def create_playlist(self, user_id: str, name: str, public: bool = False) -> Dict:
        self._record("create_playlist", user_id, name)
        self._next_id += 1
        pid = f"new{self._next_id}"
        self.playlists[pid] = {"name": name, "tracks": []}
        return {"id": pid, "name": name}

    def add_tracks_to_playlist(self, playlist_id: str, uris) -> int:
        self._record("add_tracks_to_playlist", playlist_id, tuple(uris))
        self.playlists[playlist_id]["tracks"].extend(
            {"id": u.rsplit(":", 1)[1], "uri": u} for u in uris
        )
        return 1

    def save_tracks(self, ids) -> int:
        self._record("save_tracks", tuple(ids))
        self.saved.extend({"id": i, "uri": f"spotify:track:{i}"} for i in ids)
        return 1


@pytest.fixture
def config():
    return build_config(
        {
            "PORT": "8080",
            "PUBLIC_URI": "http://localhost:8080",
            "CLIENT_ID": "test_client_id",
            "SLOWDOWN_IMPORT": "0",
            "SLOWDOWN_EXPORT": "0",
        }
    )
