"""Decoding of action definition documents and tokenizing of action strings.

The action server publishes a document of the form::

    {"actions": ["deploy env region", "ping"]}

Each action string is split on single spaces: the first token is the slash
command trigger, the rest are argument names.
"""

from __future__ import annotations

from typing import Optional

from pydantic import TypeAdapter, ValidationError

from slashbridge.errors import DecodeError, EmptyDefinitionError, MissingActionsError

ACTIONS_KEY = "actions"

_document_adapter: TypeAdapter[Optional[dict[str, list[str]]]] = TypeAdapter(
    Optional[dict[str, list[str]]]
)


class ActionDefinitionSet:
    """Decoded action definitions, keyed by section name."""

    def __init__(self, definitions: dict[str, list[str]]) -> None:
        self._definitions = definitions

    @classmethod
    def from_json(cls, data: bytes) -> ActionDefinitionSet:
        """Decode raw bytes, raising DecodeError with the payload attached."""
        try:
            decoded = _document_adapter.validate_json(data)
        except ValidationError as exc:
            reason = "; ".join(err["msg"] for err in exc.errors()) or str(exc)
            raise DecodeError(reason, data) from exc
        # A JSON null decodes to an empty set, like an empty object.
        return cls(decoded or {})

    def actions(self) -> list[str]:
        """Return the ordered action strings."""
        if ACTIONS_KEY not in self._definitions:
            raise MissingActionsError()
        return list(self._definitions[ACTIONS_KEY])

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def __repr__(self) -> str:
        return f"<ActionDefinitionSet keys={sorted(self._definitions)}>"


def parse(data: bytes) -> list[str]:
    """Decode a definition document straight to its action strings."""
    return ActionDefinitionSet.from_json(data).actions()


def tokenize(action: str) -> tuple[str, list[str]]:
    """Split an action into ``(trigger, args)``.

    Splitting is on a single space with no trimming, so ``"deploy  env"``
    yields ``("deploy", ["", "env"])``.
    """
    if not action.strip():
        raise EmptyDefinitionError(action)
    tokens = action.split(" ")
    return tokens[0], tokens[1:]
