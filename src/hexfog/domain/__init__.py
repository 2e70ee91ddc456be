"""Domain model for the hex map and its fog of war.

This package holds the pure, in-memory rules layer:

* Dataclasses describing map entities (see :mod:`models`).
* Enumerations and strongly-typed identifiers used across the rules layer.
* Sight-range configuration (see :mod:`rules_config`).
* The spatial index, visibility engine, selection router and diff producer.

Nothing here performs I/O; every function is deterministic in its inputs.
"""

from . import diff, enums, models, rules_config, selection, spatial_index, visibility

__all__ = [
    "diff",
    "enums",
    "models",
    "rules_config",
    "selection",
    "spatial_index",
    "visibility",
]
