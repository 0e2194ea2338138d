"""
Host commands.

A host (an editor panel, a web view, the CLI watcher) talks to the tree
store through small JSON messages tagged by "type":

    {"type": "settings", "value": ["useAlias", true]}
    {"type": "onFile", "value": "/app/src/index.tsx"}
    {"type": "onSave", "value": "/app/src/Header.tsx"}
    {"type": "onNodeToggle", "value": {"id": "3f2a...", "expanded": true}}
    {"type": "onSaplingVisible"}
    {"type": "clearState"}

parse_command() validates such a message into a command model and
dispatch() applies it to a TreeStore, returning the resulting snapshot.
"""

import logging
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from ..core.types import Snapshot
from ..tree.store import TreeStore

logger = logging.getLogger(__name__)


class _Command(BaseModel):
    model_config = {"populate_by_name": True, "frozen": True}


class UpdateSetting(_Command):
    type: Literal["settings"] = "settings"
    key: str
    value: Any = None

    @model_validator(mode="before")
    @classmethod
    def _unpack_pair(cls, data: Any) -> Any:
        # Panels send the change as a [key, value] pair
        if isinstance(data, dict) and "key" not in data and isinstance(data.get("value"), (list, tuple)):
            pair = data["value"]
            if len(pair) == 2:
                return {**data, "key": pair[0], "value": pair[1]}
        return data


class SelectEntryFile(_Command):
    type: Literal["onFile"] = "onFile"
    path: str = Field(alias="value")


class FileSaved(_Command):
    type: Literal["onSave"] = "onSave"
    path: str = Field(alias="value")


class ToggleNode(_Command):
    type: Literal["onNodeToggle"] = "onNodeToggle"
    id: str
    expanded: bool

    @model_validator(mode="before")
    @classmethod
    def _unpack_value(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("value"), dict):
            return {**data["value"], "type": data.get("type", "onNodeToggle")}
        return data


class RequestView(_Command):
    type: Literal["onSaplingVisible"] = "onSaplingVisible"


class ClearState(_Command):
    type: Literal["clearState"] = "clearState"


Command = Annotated[
    Union[UpdateSetting, SelectEntryFile, FileSaved, ToggleNode, RequestView, ClearState],
    Field(discriminator="type"),
]

_COMMAND_ADAPTER: TypeAdapter = TypeAdapter(Command)


def parse_command(message: Dict[str, Any]) -> Command:
    """
    Validate a raw host message.

    Raises:
        pydantic.ValidationError: For an unknown type or a malformed payload.
    """
    return _COMMAND_ADAPTER.validate_python(message)


def dispatch(store: TreeStore, command: Command) -> Snapshot:
    """
    Apply a command to the store.

    Raises:
        InvalidSettingsError: If an entry file is selected while the
            settings are invalid, or a setting update is rejected.
    """
    logger.debug(f"Dispatching {command.type}")

    if isinstance(command, UpdateSetting):
        store.update_settings(command.key, command.value)
        if store.entry_file is not None and store.valid_settings():
            return store.parse()
        return store.snapshot()

    if isinstance(command, SelectEntryFile):
        store.set_entry_file(command.path)
        return store.parse()

    if isinstance(command, FileSaved):
        if store.entry_file is None:
            return store.snapshot()
        return store.update_tree(command.path)

    if isinstance(command, ToggleNode):
        store.toggle_node(command.id, command.expanded)
        return store.snapshot()

    if isinstance(command, ClearState):
        store.clear()
        return store.snapshot()

    return store.snapshot()
