"""Error taxonomy for the sync and dispatch paths."""

from __future__ import annotations


class SlashBridgeError(Exception):
    """Base class for every error raised inside slashbridge."""

    category = "error"


class DecodeError(SlashBridgeError):
    """The action definition document is not valid JSON of the expected shape."""

    category = "decode"

    def __init__(self, reason: str, payload: bytes) -> None:
        self.reason = reason
        self.payload = payload
        super().__init__(f"can't unmarshal: {reason}, {payload!r}")


class MissingActionsError(SlashBridgeError):
    """The definition document decoded but has no ``actions`` key."""

    category = "missing_actions"

    def __init__(self) -> None:
        super().__init__("no actions specified")


class EmptyDefinitionError(SlashBridgeError):
    """An action string has no trigger token."""

    category = "empty_definition"

    def __init__(self, action: str = "") -> None:
        self.action = action
        super().__init__("definition is empty")


class TransportError(SlashBridgeError):
    """Network-level failure talking to the action server."""

    category = "transport"


class ResponseReadError(TransportError):
    """The connection failed while the response body was being read."""

    category = "response_read"


class RequestBuildError(SlashBridgeError):
    """The outgoing request could not be constructed."""

    category = "request_build"


class RegistrationError(SlashBridgeError):
    """The command registry rejected a descriptor."""

    category = "registration"

    def __init__(self, trigger: str, reason: str) -> None:
        self.trigger = trigger
        self.reason = reason
        super().__init__(f"can't register '{trigger}': {reason}")


class ResponseDecodeError(SlashBridgeError):
    """The perform-action response body is not a command result document."""

    category = "response_decode"
