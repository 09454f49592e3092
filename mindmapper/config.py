"""Editor settings, persisted in the database's settings table."""

import json
from dataclasses import dataclass, asdict
from typing import Optional

from mindmapper.layout import COLUMN_OFFSET, ROW_OFFSET
from mindmapper.models import DEFAULT_MAP_NAME, DEFAULT_ROOT_LABEL
from mindmapper.undo import DEFAULT_HISTORY_LIMIT, DEFAULT_DEBOUNCE

SETTINGS_KEY = "editor"


@dataclass
class EditorSettings:
    """Tunables for an editing session."""
    history_limit: int = DEFAULT_HISTORY_LIMIT
    history_debounce: float = DEFAULT_DEBOUNCE
    column_offset: float = COLUMN_OFFSET
    row_offset: float = ROW_OFFSET
    autosave: bool = True
    default_map_name: str = DEFAULT_MAP_NAME
    root_label: str = DEFAULT_ROOT_LABEL
    node_label: str = "New Node"

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: Optional[str]) -> "EditorSettings":
        if not data:
            return cls()
        try:
            return cls.from_dict(json.loads(data))
        except (json.JSONDecodeError, TypeError):
            return cls()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "EditorSettings":
        if not isinstance(data, dict):
            return cls()
        # Filter to only known fields to handle schema evolution
        known = {f.name for f in cls.__dataclass_fields__.values()}
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except TypeError:
            return cls()

    @classmethod
    def load(cls, db) -> "EditorSettings":
        return cls.from_dict(db.get_setting(SETTINGS_KEY))

    def save(self, db):
        db.set_setting(SETTINGS_KEY, asdict(self))
