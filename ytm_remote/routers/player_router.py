"""Player control routes."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from ytm_remote.dependencies import get_playback_client
from ytm_remote.exceptions import (
    ArtworkException,
    InvalidCommandException,
    PlayerConnectionException,
    PlayerNotConnectedException,
)
from ytm_remote.logging_config import get_logger, log_with_context
from ytm_remote.models import CommandResponse, ErrorResponse, PlayerSnapshot, SeekRequest, VolumeRequest
from ytm_remote.security import verify_api_key
from ytm_remote.services.playback_client import PlaybackClient

router = APIRouter(dependencies=[Depends(verify_api_key)])
limiter = Limiter(key_func=get_remote_address)
logger = get_logger(__name__)


def _require_connected(client: PlaybackClient) -> PlayerSnapshot:
    snapshot = client.snapshot
    if snapshot is None:
        raise PlayerNotConnectedException(details={"uri": client.session.uri})
    return snapshot


@router.get(
    "/state",
    response_model=PlayerSnapshot,
    responses={503: {"model": ErrorResponse, "description": "Not connected to the player"}},
)
@limiter.limit("120/minute")
async def get_state(
    request: Request,
    client: PlaybackClient = Depends(get_playback_client),
):
    """Current player snapshot."""
    return _require_connected(client)


async def _run(client: PlaybackClient, action: str) -> CommandResponse:
    _require_connected(client)
    commands = {
        "play": client.play,
        "pause": client.pause,
        "next": client.skip,
        "previous": client.skip_back,
        "mute": client.toggle_mute,
        "shuffle": client.shuffle,
        "repeat": client.toggle_repeat,
    }
    sent = await commands[action]()
    log_with_context(logger, "info", "Player command", action=action, sent=sent, event_type="player_command")
    return CommandResponse(action=action, sent=sent)


@router.post("/play", response_model=CommandResponse)
@limiter.limit("60/minute")
async def play(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    """Resume playback. `sent` is false when already playing."""
    return await _run(client, "play")


@router.post("/pause", response_model=CommandResponse)
@limiter.limit("60/minute")
async def pause(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    """Pause playback. `sent` is false when already paused."""
    return await _run(client, "pause")


@router.post("/next", response_model=CommandResponse)
@limiter.limit("60/minute")
async def next_track(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    return await _run(client, "next")


@router.post("/previous", response_model=CommandResponse)
@limiter.limit("60/minute")
async def previous_track(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    return await _run(client, "previous")


@router.post("/mute", response_model=CommandResponse)
@limiter.limit("60/minute")
async def toggle_mute(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    return await _run(client, "mute")


@router.post("/shuffle", response_model=CommandResponse)
@limiter.limit("60/minute")
async def shuffle(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    return await _run(client, "shuffle")


@router.post("/repeat", response_model=CommandResponse)
@limiter.limit("60/minute")
async def toggle_repeat(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    """Advance the repeat mode (NONE -> ALL -> ONE -> NONE)."""
    return await _run(client, "repeat")


@router.post(
    "/volume",
    response_model=CommandResponse,
    responses={422: {"model": ErrorResponse, "description": "Value is not +N, -N or N"}},
)
@limiter.limit("60/minute")
async def set_volume(
    request: Request,
    body: VolumeRequest,
    client: PlaybackClient = Depends(get_playback_client),
):
    """Set the volume.

    `"+10"` / `"-10"` adjust relative to the current volume, `"45"` sets it.
    Targets are clamped to 0..100; `sent` is false when nothing changes.
    """
    _require_connected(client)
    command, sent = await client.adjust_volume(body.value)
    if not command.valid:
        raise InvalidCommandException(body.value, details={"action": "setVolume"})
    return CommandResponse(action="setVolume", sent=sent, target=command.target)


@router.post(
    "/seek",
    response_model=CommandResponse,
    responses={422: {"model": ErrorResponse, "description": "Value is not +N, -N, N or m:ss"}},
)
@limiter.limit("60/minute")
async def seek(
    request: Request,
    body: SeekRequest,
    client: PlaybackClient = Depends(get_playback_client),
):
    """Seek within the current track.

    Relative values move by seconds; absolute values accept seconds or m:ss.
    Targets are clamped to the track duration.
    """
    _require_connected(client)
    command, sent = await client.seek(body.value)
    if not command.valid:
        raise InvalidCommandException(body.value, details={"action": "seek"})
    return CommandResponse(action="seek", sent=sent, target=command.target)


@router.post("/reconnect", response_model=CommandResponse)
@limiter.limit("10/minute")
async def reconnect(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    """Drop the current connection (if any) and connect again.

    Answers 503 when the player cannot be reached.
    """
    if not await client.reconnect():
        raise PlayerConnectionException(details={"uri": client.session.uri})
    return CommandResponse(action="reconnect", sent=True)


@router.get(
    "/artwork",
    response_class=FileResponse,
    responses={
        200: {"content": {"image/jpeg": {}}, "description": "Artwork of the current track"},
        502: {"model": ErrorResponse, "description": "Artwork unavailable"},
    },
)
@limiter.limit("60/minute")
async def get_artwork(request: Request, client: PlaybackClient = Depends(get_playback_client)):
    """Artwork of the current track, served from the local cache."""
    snapshot = _require_connected(client)
    path = await client.get_artwork(snapshot.track)
    if path is None:
        raise ArtworkException(details={"track_id": snapshot.track.track_id})
    return FileResponse(path, media_type="image/jpeg")
