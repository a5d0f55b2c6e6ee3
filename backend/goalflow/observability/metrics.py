"""Counters for interview and scheduling outcomes, recorded as Opik traces."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from goalflow.core.context import get_interview_id
from goalflow.observability import client as client_module

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record ``metric:<name>`` with ``value``; does nothing while Opik is off.

    The interview id bound to the current context, if any, rides along in
    the metadata so counters can be grouped per interview.
    """
    client = client_module.get_opik_client()
    if not client:
        return

    payload: Dict[str, Any] = dict(metadata or {})
    payload["value"] = value
    interview_id = get_interview_id()
    if interview_id:
        payload.setdefault("interview_id", interview_id)

    try:
        client.trace(name=f"metric:{name}", metadata=payload).end()
    except Exception as exc:  # pragma: no cover - defensive
        logger.debug("Unable to record metric %s=%s: %s", name, value, exc)
