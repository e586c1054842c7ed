"""Turn tokenized actions into slash command descriptors."""

from __future__ import annotations

from typing import Sequence

from slashbridge.modules.actions.models import AutocompleteData, CommandDescriptor, DynamicListArgument


def build_command(trigger: str, args: Sequence[str], completion_path: str) -> CommandDescriptor:
    """Build an autocompleting command for ``trigger``.

    Every argument becomes a dynamic list slot served from ``completion_path``.
    The trigger is used as-is; the host decides whether it is acceptable.
    """
    arguments = tuple(
        DynamicListArgument(name=arg, help_text=arg, fetch_url=completion_path, is_list=True)
        for arg in args
    )
    return CommandDescriptor(
        trigger=trigger,
        auto_complete=True,
        autocomplete_data=AutocompleteData(trigger=trigger, arguments=arguments),
    )
