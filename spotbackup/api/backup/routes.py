from dataclasses import asdict
from typing import Any, List, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from spotbackup.api.dependencies import (
    ClientFactory,
    get_access_token,
    get_client_factory,
    get_config,
    get_origin_registry,
)
from spotbackup.backup import (
    OriginRegistry,
    backup_filename,
    build_collection,
    collection_to_dict,
    execute_plan,
    parse_backup,
    plan_import,
    summarize_plan,
)
from spotbackup.config import Config
from spotbackup.core import (
    AddToPlaylist,
    Collection,
    CreatePlaylistAndAdd,
    MalformedImportError,
    MutationAction,
    PartialImportFailure,
    SaveTracks,
    SnapshotError,
    log_section,
)

from .schemas import (
    ActionInfo,
    CollectionStats,
    CreatedPlaylist,
    ImportResponse,
    PlanResponse,
    PlanSummary,
)

router = APIRouter()


# --- Helpers ---------------------------------------------------------------


def _action_to_info(action: MutationAction) -> ActionInfo:
    if isinstance(action, SaveTracks):
        return ActionInfo(kind=action.kind, track_count=len(action.ids), ids=list(action.ids))
    if isinstance(action, CreatePlaylistAndAdd):
        return ActionInfo(
            kind=action.kind,
            name=action.name,
            track_count=len(action.uris),
            uris=list(action.uris),
        )
    if isinstance(action, AddToPlaylist):
        return ActionInfo(
            kind=action.kind,
            name=action.name,
            playlist_id=action.playlist_id,
            track_count=len(action.uris),
            uris=list(action.uris),
        )
    raise TypeError(f"Unsupported mutation action: {action!r}")


def _raise_snapshot_failed(e: SnapshotError) -> NoReturn:
    raise HTTPException(
        status_code=502,
        detail={
            "message": str(e),
            "progress": asdict(e.progress) if e.progress is not None else None,
        },
    )


def _parse_or_400(payload: Any) -> Collection:
    try:
        return parse_backup(payload)
    except MalformedImportError as e:
        raise HTTPException(status_code=400, detail=f"Invalid backup file: {e}")


# --- /backup/export --------------------------------------------------------


@router.get("/export")
def export_backup(
    token: str = Depends(get_access_token),
    config: Config = Depends(get_config),
    client_factory: ClientFactory = Depends(get_client_factory),
    origins: OriginRegistry = Depends(get_origin_registry),
) -> JSONResponse:
    """
    Snapshot the account and return it as a downloadable backup file.
    """
    log_section("Export")
    client = client_factory(token, config.slowdown_export)
    try:
        collection = build_collection(client, origin_registry=origins)
    except SnapshotError as e:
        _raise_snapshot_failed(e)

    return JSONResponse(
        collection_to_dict(collection),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


# --- /backup/plan ----------------------------------------------------------


@router.post("/plan", response_model=PlanResponse)
def preview_import(
    payload: Any = Body(...),
    token: str = Depends(get_access_token),
    config: Config = Depends(get_config),
    client_factory: ClientFactory = Depends(get_client_factory),
    origins: OriginRegistry = Depends(get_origin_registry),
) -> PlanResponse:
    """
    Compare a backup with the account and return the import plan.

    Reads Spotify only, nothing is modified.
    """
    source = _parse_or_400(payload)

    log_section("Import preview")
    client = client_factory(token, config.slowdown_export)
    try:
        target = build_collection(client, origin_registry=origins)
    except SnapshotError as e:
        _raise_snapshot_failed(e)

    actions = plan_import(target, source)
    return PlanResponse(
        status="done",
        summary=PlanSummary(**summarize_plan(actions)),
        actions=[_action_to_info(a) for a in actions],
    )


# --- /backup/import --------------------------------------------------------


@router.post("/import", response_model=ImportResponse)
def import_backup(
    payload: Any = Body(...),
    token: str = Depends(get_access_token),
    config: Config = Depends(get_config),
    client_factory: ClientFactory = Depends(get_client_factory),
    origins: OriginRegistry = Depends(get_origin_registry),
) -> ImportResponse:
    """
    Restore a backup: add whatever the account is missing.

    Additive only; nothing is deleted. Stops at the first failing action and
    reports it (502), earlier actions stay applied.
    """
    source = _parse_or_400(payload)

    log_section("Import")
    client = client_factory(token, config.slowdown_import)
    try:
        target = build_collection(client, origin_registry=origins)
    except SnapshotError as e:
        _raise_snapshot_failed(e)

    actions = plan_import(target, source)
    summary = PlanSummary(**summarize_plan(actions))

    try:
        result = execute_plan(client, actions, origin_registry=origins)
    except PartialImportFailure as e:
        raise HTTPException(
            status_code=502,
            detail={
                "message": str(e),
                "failed_action": _action_to_info(e.action).model_dump(),
                "index": e.index,
                "applied": e.applied,
            },
        )
    except SnapshotError as e:
        # Every action went through; only the refresh failed.
        _raise_snapshot_failed(e)

    created: List[CreatedPlaylist] = [
        CreatedPlaylist(id=new_id, source_id=source_id)
        for new_id, source_id in result.created.items()
    ]
    stats = None
    if result.collection is not None:
        stats = CollectionStats(
            playlists=len(result.collection.playlists),
            tracks=result.collection.track_count,
        )

    return ImportResponse(
        status="done",
        summary=summary,
        applied=[_action_to_info(a) for a in result.applied],
        created=created,
        collection=stats,
    )
