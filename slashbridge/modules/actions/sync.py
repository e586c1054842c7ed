"""Keep registered slash commands in step with the action server.

Every ``sync_interval_seconds`` the sync job asks ``GET /list-actions`` for the
current definitions, presenting the last ETag it saw. A 304 means nothing
changed. Otherwise the new ETag is stored straight away and each action is
tokenized, built and registered in order. The first failure stops the cycle;
commands registered before it stay registered. Nothing raised inside a cycle
escapes it: the next tick simply tries again.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from slashbridge.config import Settings, get_settings
from slashbridge.errors import DecodeError, SlashBridgeError, TransportError
from slashbridge.logging_config import get_logger
from slashbridge.modules.actions.builder import build_command
from slashbridge.modules.actions.models import SyncOutcome, SyncState, SyncStatus
from slashbridge.modules.actions.parser import parse, tokenize
from slashbridge.modules.commands.registry import CommandRegistry, get_registry
from slashbridge.modules.scheduler.service import SchedulerService

logger = get_logger(__name__)

JOB_NAME = "UpdateSlashActions"
HTTP_NOT_MODIFIED = 304


class ActionSync:
    """Owns the sync schedule and the ETag of the last definitions fetched."""

    def __init__(
        self,
        registry: Optional[CommandRegistry] = None,
        scheduler: Optional[SchedulerService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._registry = registry if registry is not None else get_registry()
        self._scheduler = scheduler or SchedulerService()
        self._etag = ""
        self._state = SyncState.IDLE
        self._task_id: Optional[str] = None
        self._lock = asyncio.Lock()
        self.last_outcome: Optional[SyncOutcome] = None

    @property
    def etag(self) -> str:
        return self._etag

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def scheduled(self) -> bool:
        return self._task_id is not None

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Begin the recurring sync. Calling it again is a no-op."""
        if self._task_id is not None:
            return
        await self._scheduler.start()
        self._task_id = self._scheduler.schedule_interval(
            JOB_NAME,
            self._tick,
            seconds=self._settings.sync_interval_seconds,
            run_immediately=self._settings.sync_on_start,
        )
        logger.info(
            "slash_action_sync_started",
            interval_seconds=self._settings.sync_interval_seconds,
            source=self._settings.list_actions_url,
        )

    async def stop(self) -> None:
        """Cancel the schedule and wait for an in-flight cycle to finish."""
        if self._task_id is not None:
            self._scheduler.cancel_task(self._task_id)
            self._task_id = None
        await self._scheduler.stop()
        async with self._lock:
            logger.info("slash_action_sync_stopped")

    async def _tick(self) -> None:
        await self.sync_once()

    # ── One cycle ────────────────────────────────────────────────────

    async def sync_once(self) -> SyncOutcome:
        """Run a single fetch/parse/register cycle and report how it went."""
        registered: list[str] = []
        async with self._lock:
            self._state = SyncState.SYNCING
            logger.debug("updating_slash_actions", etag=self._etag)
            try:
                status = await self._update_slash_actions(registered)
                outcome = SyncOutcome(status=status, registered=registered, etag=self._etag)
            except SlashBridgeError as exc:
                self._log_failure(exc, registered)
                outcome = SyncOutcome(
                    status=SyncStatus.FAILED,
                    registered=registered,
                    etag=self._etag,
                    error=str(exc),
                    error_category=exc.category,
                )
            except Exception as exc:
                logger.exception("slash_actions_update_crashed", registered=len(registered))
                outcome = SyncOutcome(
                    status=SyncStatus.FAILED,
                    registered=registered,
                    etag=self._etag,
                    error=str(exc),
                    error_category="unexpected",
                )
            finally:
                self._state = SyncState.IDLE
        self.last_outcome = outcome
        return outcome

    async def _update_slash_actions(self, registered: list[str]) -> SyncStatus:
        response = await self._fetch()

        if response.status_code == HTTP_NOT_MODIFIED:
            logger.info("slash_actions_up_to_date", etag=self._etag)
            return SyncStatus.NOT_MODIFIED

        # Stored before parsing: a bad payload under this ETag is not refetched.
        self._etag = response.headers.get("ETag", "")

        for action in parse(response.content):
            trigger, args = tokenize(action)
            command = build_command(trigger, args, self._settings.completion_path)
            self._registry.register(command)
            registered.append(trigger)

        logger.info("slash_actions_updated", count=len(registered), etag=self._etag)
        return SyncStatus.UPDATED

    async def _fetch(self) -> httpx.Response:
        headers = {"If-None-Match": self._etag} if self._etag else {}
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout_seconds) as client:
                return await client.get(self._settings.list_actions_url, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"can't get: {exc}") from exc

    @staticmethod
    def _log_failure(exc: SlashBridgeError, registered: list[str]) -> None:
        context = {"error": str(exc), "category": exc.category, "registered": len(registered)}
        if isinstance(exc, DecodeError):
            context["payload"] = exc.payload.decode("utf-8", errors="replace")
        logger.error("slash_actions_update_failed", **context)
