"""Forward slash command invocations to the action server.

``DispatchGateway.dispatch`` always returns a ``CommandResult``. Any failure
along the way is turned into an ephemeral result so the invoking user sees
what went wrong and the host never sees an error.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from slashbridge.config import Settings, get_settings
from slashbridge.errors import (
    RequestBuildError,
    ResponseDecodeError,
    ResponseReadError,
    SlashBridgeError,
    TransportError,
)
from slashbridge.logging_config import get_logger
from slashbridge.modules.actions.models import CommandResult

logger = get_logger(__name__)

# Checked in order; ResponseReadError must come before its base TransportError.
ERROR_PREFIXES: tuple[tuple[type[SlashBridgeError], str], ...] = (
    (RequestBuildError, "Error building request"),
    (ResponseReadError, "Error reading request response"),
    (TransportError, "Error sending request"),
    (ResponseDecodeError, "Error parsing request response"),
)
FALLBACK_PREFIX = "Error performing action"


def error_result(exc: Exception) -> CommandResult:
    """Fold an exception into the ephemeral result shown to the user."""
    prefix = next(
        (text for cls, text in ERROR_PREFIXES if isinstance(exc, cls)),
        FALLBACK_PREFIX,
    )
    return CommandResult.ephemeral(f"{prefix}: {exc}")


class DispatchGateway:
    """Round-trips one invocation line through ``POST /perform-action``."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @property
    def endpoint(self) -> str:
        return self._settings.perform_action_url

    async def dispatch(self, invocation_line: str) -> CommandResult:
        """Execute ``invocation_line`` remotely and return what the user should see."""
        try:
            result = await self._perform(invocation_line)
        except SlashBridgeError as exc:
            logger.warning(
                "perform_action_failed",
                action=invocation_line,
                category=exc.category,
                error=str(exc),
            )
            return error_result(exc)
        except Exception as exc:
            logger.exception("perform_action_crashed", action=invocation_line)
            return error_result(exc)

        logger.info("perform_action_done", action=invocation_line, response_type=result.response_type)
        return result

    async def _perform(self, invocation_line: str) -> CommandResult:
        async with httpx.AsyncClient(timeout=self._settings.http_timeout_seconds) as client:
            try:
                request = client.build_request(
                    "POST",
                    self.endpoint,
                    json={"action": invocation_line},
                    headers={"Content-Type": "application/json"},
                )
            except (TypeError, ValueError, httpx.InvalidURL) as exc:
                raise RequestBuildError(str(exc)) from exc

            try:
                response = await client.send(request, stream=True)
            except httpx.HTTPError as exc:
                raise TransportError(str(exc)) from exc

            try:
                body = await response.aread()
            except httpx.HTTPError as exc:
                raise ResponseReadError(str(exc)) from exc
            finally:
                await response.aclose()

        if response.status_code >= 400:
            logger.warning("perform_action_http_status", status=response.status_code)
        return self.decode_response(body)

    @staticmethod
    def decode_response(body: bytes) -> CommandResult:
        """Decode a perform-action body into a CommandResult."""
        try:
            return CommandResult.model_validate_json(body)
        except ValidationError as exc:
            reason = "; ".join(err["msg"] for err in exc.errors()) or str(exc)
            raise ResponseDecodeError(reason) from exc
