"""Queue placement of creation manifests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import QueueState

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True, slots=True)
class QueueItem:
    """A manifest file together with the storage location it currently sits in."""

    name: str
    path: Path
    state: QueueState = QueueState.PENDING

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def is_terminal(self) -> bool:
        return self.state is not QueueState.PENDING
