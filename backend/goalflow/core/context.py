"""Per-interview context utilities."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

interview_id_ctx_var: ContextVar[str | None] = ContextVar("interview_id", default=None)


def get_interview_id() -> str | None:
    """Return the interview id bound to the current context, if any."""
    return interview_id_ctx_var.get()


@contextmanager
def bind_interview_id(interview_id: str) -> Iterator[None]:
    """Bind an interview id for log records emitted inside the block."""
    token = interview_id_ctx_var.set(interview_id)
    try:
        yield
    finally:
        interview_id_ctx_var.reset(token)
