"""Snapshot listener protocol.

Renderers, minimaps and selection logic subscribe to the visibility service
with any callable matching this protocol.
"""

from typing import Protocol

from hexfog.domain.diff import VisibilitySnapshot


class SnapshotListener(Protocol):
    """Receives every snapshot the visibility service publishes.

    Listeners should update only ``snapshot.changed`` coordinates and read
    their new state from ``snapshot.states``.
    """

    def __call__(self, snapshot: VisibilitySnapshot) -> None: ...
