"""
Talentbook selection

The selection of talents picked in the talentbook is client state: a tuple
of talent ids updated by a pure reducer, persisted through a small
key-value store chosen by the caller.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple, Union

logger = logging.getLogger(__name__)

Selection = Tuple[int, ...]

ACTIONS = ("toggle", "add", "remove", "clear")


def selection_reducer(state: Selection, action: Dict[str, Any]) -> Selection:
    """
    Apply an action to a selection and return the new selection

    Actions:
        {"type": "toggle", "id": 3}  add 3 if absent, remove it otherwise
        {"type": "add", "id": 3}     add 3 once, order of insertion is kept
        {"type": "remove", "id": 3}  drop 3 if present
        {"type": "clear"}            empty selection
    """
    action_type = action.get("type")
    if action_type not in ACTIONS:
        raise ValueError(f"Unknown selection action: {action_type!r}")

    if action_type == "clear":
        return ()

    talent_id = int(action["id"])
    if action_type == "toggle":
        if talent_id in state:
            return tuple(i for i in state if i != talent_id)
        return state + (talent_id,)
    if action_type == "add":
        return state if talent_id in state else state + (talent_id,)
    return tuple(i for i in state if i != talent_id)


class JSONSelectionStore:
    """Key-value persistence of selections in a single JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Corrupted selection store {self.path}, starting empty")
            return {}

    def load(self, key: str) -> Selection:
        return tuple(int(i) for i in self._read().get(key, []))

    def save(self, key: str, state: Selection) -> None:
        data = self._read()
        data[key] = list(state)
        self.path.write_text(json.dumps(data), encoding="utf-8")
