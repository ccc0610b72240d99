"""JSON-backed option store with change notification."""

import json
import os

from .config import STATE_FILE
from .util import log, read_file, replace_file

PET_ENABLED = "backgroundCoverPetEnabled"
PET_TYPE = "backgroundCoverPetType"
EDGES = "mascotEdges"
SPEECH = "mascotSpeech"

DEFAULTS = {
    PET_ENABLED: False,
    PET_TYPE: "akita",
    EDGES: {"top": True, "right": False, "bottom": False, "left": False},
    SPEECH: {"enabled": True, "fontSize": "12px"},
}


class JsonStore:
    def __init__(self, path=STATE_FILE):
        self.path = path
        self._listeners = []

    def _load(self):
        if not os.path.exists(self.path):
            return {}
        try:
            data = json.loads(read_file(self.path))
        except (OSError, ValueError) as e:
            log(f"Ignoring unreadable state file {self.path}: {e}", "WARN")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, name, default=None):
        data = self._load()
        if name in data:
            return data[name]
        if default is None:
            return DEFAULTS.get(name)
        return default

    def update(self, name, value):
        data = self._load()
        if data.get(name) == value and name in data:
            return
        data[name] = value
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        replace_file(self.path, json.dumps(data, indent=2, sort_keys=True) + "\n")
        for callback in list(self._listeners):
            callback(name, value)

    def subscribe(self, callback):
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)
