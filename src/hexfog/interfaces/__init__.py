"""Protocol interfaces consumed by the service layer."""

from hexfog.interfaces.visibility import SnapshotListener

__all__ = ["SnapshotListener"]
