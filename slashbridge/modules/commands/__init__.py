"""Command registry - where synced slash commands live."""

from slashbridge.modules.commands.registry import CommandRegistry, get_registry

__all__ = ["CommandRegistry", "get_registry"]
