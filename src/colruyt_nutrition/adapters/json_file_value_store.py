"""Key-value store persisted to a local JSON file."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from colruyt_nutrition.services.cache import ValueStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileValueStore(ValueStore):
    """Keep all values in memory and rewrite the file on every change."""

    path: Path
    _values: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if not self.path.exists():
            return
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            _logger.warning("Ignoring unreadable store file: %s", self.path)
            return
        if isinstance(loaded, dict):
            self._values = {k: v for k, v in loaded.items() if isinstance(v, str)}

    def get_value(self, key: str, default: str) -> str:
        return self._values.get(key, default)

    def set_value(self, key: str, value: str) -> None:
        self._values[key] = value
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
