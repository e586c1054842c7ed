"""API route definitions for slashbridge."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from slashbridge.logging_config import get_logger
from slashbridge.modules.actions.dispatch import DispatchGateway
from slashbridge.modules.actions.models import CommandResult, SyncOutcome
from slashbridge.modules.actions.sync import ActionSync
from slashbridge.modules.commands.registry import get_registry

logger = get_logger(__name__)

router = APIRouter()


# ── Request / Response Models ────────────────────────────────────────

class ExecuteCommandRequest(BaseModel):
    """A slash command invocation forwarded by the host."""

    command: str
    user_id: str = ""
    channel_id: str = ""
    team_id: str = ""


# ── Service accessors (set from main.py) ─────────────────────────────

_action_sync: Optional[ActionSync] = None
_gateway: Optional[DispatchGateway] = None


def set_services(action_sync: Optional[ActionSync], gateway: Optional[DispatchGateway]) -> None:
    """Inject the sync coordinator and dispatch gateway."""
    global _action_sync, _gateway
    _action_sync = action_sync
    _gateway = gateway


def get_action_sync() -> ActionSync:
    """Get the sync coordinator, raising if not initialized."""
    if _action_sync is None:
        raise HTTPException(status_code=503, detail="Command sync not initialized")
    return _action_sync


def get_gateway() -> DispatchGateway:
    """Get the dispatch gateway, raising if not initialized."""
    if _gateway is None:
        raise HTTPException(status_code=503, detail="Dispatch gateway not initialized")
    return _gateway


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Sync state and registry size."""
    sync = get_action_sync()
    last = sync.last_outcome
    return {
        "status": "healthy",
        "sync_state": sync.state.value,
        "sync_scheduled": sync.scheduled,
        "has_etag": bool(sync.etag),
        "last_sync": last.status.value if last else None,
        "commands": len(get_registry()),
    }


# ── Commands ─────────────────────────────────────────────────────────

@router.get("/commands")
async def list_commands(search: Optional[str] = Query(None)) -> dict[str, Any]:
    """List registered slash commands, optionally filtered by trigger or argument name."""
    registry = get_registry()
    if not search:
        return registry.to_dict()
    commands = registry.search(search)
    return {"total": len(commands), "commands": [cmd.to_dict() for cmd in commands]}


@router.get("/commands/{trigger}")
async def get_command(trigger: str) -> dict[str, Any]:
    """Show one registered command."""
    command = get_registry().get(trigger)
    if command is None:
        raise HTTPException(status_code=404, detail=f"Command '{trigger}' not registered")
    return command.to_dict()


@router.post("/commands/execute", response_model=CommandResult)
async def execute_command(req: ExecuteCommandRequest) -> CommandResult:
    """Run a slash command through the action server.

    Always answers 200: failures come back as ephemeral results.
    """
    gateway = get_gateway()
    trigger = req.command.lstrip("/").split(" ", 1)[0]
    logger.info(
        "execute_command",
        trigger=trigger,
        registered=trigger in get_registry(),
        user_id=req.user_id,
        channel_id=req.channel_id,
    )
    return await gateway.dispatch(req.command)


# ── Sync ─────────────────────────────────────────────────────────────

@router.post("/sync", response_model=SyncOutcome)
async def sync_now() -> SyncOutcome:
    """Run one sync cycle immediately."""
    return await get_action_sync().sync_once()
