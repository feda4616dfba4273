from enum import Enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


class ActionKind(Enum):
    CREATED = "created"
    REMOVED = "removed"
    RENAMED = "renamed"
    CHANGED = "changed"
    ATTRIBUTE_CHANGED = "attribute-changed"
    STOPPED = "stopped"


@dataclass(frozen=True)
class FilesystemEvent:
    watch_handle: Any
    action_kind: ActionKind
    path: Path
    path2: Optional[Path] = None

    def __str__(self):
        if self.path2:
            return f"{self.action_kind.value}: {self.path} -> {self.path2}"
        return f"{self.action_kind.value}: {self.path}"
