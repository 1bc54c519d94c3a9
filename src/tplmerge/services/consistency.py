from __future__ import annotations

import logging

import yaml

from ..errors import ConsistencyError


def _dump(data) -> str:
    return yaml.safe_dump(data, default_flow_style=True, sort_keys=True, width=float("inf")).strip()


def check_consistency(specification, logger: logging.Logger) -> None:
    """Warn about each dangling element, then fail if there were any."""
    dangling = specification.dangling_elements()
    if not dangling:
        return

    for el in dangling:
        logger.warning("Dangling %s %r: %s", el.kind, el.name, _dump(el.data))

    raise ConsistencyError(f"{len(dangling)} dangling element(s) in specification", dangling)
