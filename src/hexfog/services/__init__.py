"""Service layer for hexfog.

Services orchestrate the pure domain functions for an owning application:

    - VisibilityService: rebuild index, recompute fog, diff, write back,
      notify subscribers

Usage:
    from hexfog.services import VisibilityService

    service = VisibilityService(local_player=PlayerID("P1"))
    service.subscribe(renderer.on_visibility)
    service.on_unit_moved(tiles, units, cities, unit)
"""

from hexfog.services.visibility_service import VisibilityService

__all__ = ["VisibilityService"]
