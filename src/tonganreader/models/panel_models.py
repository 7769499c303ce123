"""Models for the word lookup panel and flashcard editor states."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Union

from tonganreader.services.dictionary_service import DictionaryEntry


@dataclass(frozen=True)
class Idle:
    """Nothing selected."""
    tag = "idle"


@dataclass(frozen=True)
class Loading:
    """A lookup for ``word`` is in flight."""
    word: str
    tag = "loading"


@dataclass(frozen=True)
class Ready:
    word: str
    entry: DictionaryEntry
    tag = "ready"


@dataclass(frozen=True)
class Editing:
    """A phrase pair is being edited; ``entry`` keeps the saved values."""
    word: str
    entry: DictionaryEntry
    draft: DictionaryEntry
    tag = "editing"


@dataclass(frozen=True)
class Saving:
    word: str
    entry: DictionaryEntry
    tag = "saving"


@dataclass(frozen=True)
class Error:
    word: Optional[str]
    reason: str
    tag = "error"


PanelState = Union[Idle, Loading, Ready, Editing, Saving, Error]

STATE_TYPES = {cls.tag: cls for cls in (Idle, Loading, Ready, Editing, Saving, Error)}


def state_to_dict(state: PanelState) -> Dict[str, Any]:
    """Serialize a state for the session or a view model."""
    data = asdict(state)
    data["state"] = state.tag
    return data


def state_from_dict(data: Optional[Dict[str, Any]]) -> PanelState:
    """Restore a state written by ``state_to_dict``; unknown data gives Idle."""
    if not data or data.get("state") not in STATE_TYPES:
        return Idle()
    fields = {key: value for key, value in data.items() if key != "state"}
    for key in ("entry", "draft"):
        if fields.get(key) is not None:
            fields[key] = DictionaryEntry(**fields[key])
    return STATE_TYPES[data["state"]](**fields)
