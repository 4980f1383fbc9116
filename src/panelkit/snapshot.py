"""Snapshot preparation for export."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping, Optional, Sequence


logger = logging.getLogger(__name__)

DEFAULT_STRIP_FIELDS = ("sql", "source_definition")


def strip_snapshot_for_export(
    snapshot: Optional[Mapping[str, Any]],
    strip_fields: Sequence[str] = DEFAULT_STRIP_FIELDS,
) -> Optional[Dict[str, Any]]:
    """
    Remove fields that should not leave the workspace from a dashboard snapshot.

    Every entry of the snapshot's `panels` mapping loses the given fields;
    everything else is copied as is. The input snapshot is not modified.

    Args:
        snapshot: Snapshot mapping, or None.
        strip_fields: Panel fields to remove.

    Returns:
        Stripped deep copy, or None when there is no snapshot.
    """
    if snapshot is None:
        return None

    stripped = copy.deepcopy(dict(snapshot))
    panels = stripped.get("panels")
    if isinstance(panels, dict):
        for panel in panels.values():
            if not isinstance(panel, dict):
                continue
            for field_name in strip_fields:
                panel.pop(field_name, None)
        logger.debug("Stripped %s from %d panels", list(strip_fields), len(panels))
    return stripped
