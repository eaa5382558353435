from typing import List, Optional

from pydantic import BaseModel


class ActionInfo(BaseModel):
    kind: str
    name: Optional[str] = None
    playlist_id: Optional[str] = None
    track_count: int
    uris: List[str] = []
    ids: List[str] = []


class PlanSummary(BaseModel):
    actions: int
    playlists_to_create: int
    playlists_to_update: int
    tracks_to_add: int
    tracks_to_save: int


class PlanResponse(BaseModel):
    status: str
    summary: PlanSummary
    actions: List[ActionInfo]


class CreatedPlaylist(BaseModel):
    id: str
    source_id: Optional[str] = None


class CollectionStats(BaseModel):
    playlists: int
    tracks: int


class ImportResponse(BaseModel):
    status: str
    summary: PlanSummary
    applied: List[ActionInfo]
    created: List[CreatedPlaylist]
    collection: Optional[CollectionStats] = None
