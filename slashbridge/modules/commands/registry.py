"""Command Registry - the host-side store of registered slash commands.

The sync job writes descriptors here; the execute route and the CLI read
from it. Registering a trigger that already exists replaces the old entry,
so the last registration wins.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from slashbridge.errors import RegistrationError
from slashbridge.logging_config import get_logger
from slashbridge.modules.actions.models import CommandDescriptor

logger = get_logger(__name__)

MAX_TRIGGER_LENGTH = 128
_INVALID_TRIGGER = re.compile(r"[\s/]")


class CommandRegistry:
    """In-process registry of slash commands keyed by trigger."""

    def __init__(self, commands: Optional[dict[str, CommandDescriptor]] = None):
        self._commands: dict[str, CommandDescriptor] = dict(commands or {})

    def register(self, command: CommandDescriptor) -> None:
        """Add or replace a command, raising RegistrationError if the host rejects it."""
        trigger = command.trigger
        if not trigger:
            raise RegistrationError(trigger, "trigger is empty")
        if len(trigger) > MAX_TRIGGER_LENGTH:
            raise RegistrationError(trigger, f"trigger longer than {MAX_TRIGGER_LENGTH} characters")
        if _INVALID_TRIGGER.search(trigger):
            raise RegistrationError(trigger, "trigger must not contain whitespace or '/'")

        replaced = trigger in self._commands
        self._commands[trigger] = command
        logger.debug("command_registered", trigger=trigger, replaced=replaced)

    def get(self, trigger: str) -> Optional[CommandDescriptor]:
        """Get a command by trigger."""
        return self._commands.get(trigger)

    def list_all(self) -> list[CommandDescriptor]:
        """List all commands in registration order."""
        return list(self._commands.values())

    def search(self, query: str) -> list[CommandDescriptor]:
        """Find commands whose trigger or argument names contain ``query``."""
        query = query.lower()
        return [
            cmd for cmd in self._commands.values()
            if query in cmd.trigger.lower()
            or any(query in name.lower() for name in cmd.argument_names)
        ]

    def clear(self) -> None:
        self._commands.clear()

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, trigger: object) -> bool:
        return trigger in self._commands

    def to_dict(self) -> dict[str, Any]:
        """Export the registry for the API."""
        return {
            "total": len(self._commands),
            "commands": [cmd.to_dict() for cmd in self._commands.values()],
        }


# Global registry instance
_registry: Optional[CommandRegistry] = None


def get_registry() -> CommandRegistry:
    """Get the global command registry."""
    global _registry
    if _registry is None:
        _registry = CommandRegistry()
    return _registry
