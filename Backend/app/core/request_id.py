# Backend/app/core/request_id.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional
import contextvars

_request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)
_user_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("user_id", default=None)

# -------- Request ID (API) ---------------------------------------------------

def set_request_id(request_id: Optional[str]) -> None:
    _request_id_ctx.set(request_id)

def get_request_id() -> Optional[str]:
    return _request_id_ctx.get()

def clear_request_id() -> None:
    _request_id_ctx.set(None)

# -------- User ID (profile evaluations) --------------------------------------

def get_user_id() -> Optional[str]:
    return _user_id_ctx.get()

@contextmanager
def with_user_id(user_id: Optional[str]) -> Iterator[Optional[str]]:
    """
    Bind the evaluated user to every log line inside the block:
        with with_user_id(profile.user_id):
            ... build catalog ...
    """
    previous = _user_id_ctx.get()
    _user_id_ctx.set(user_id)
    try:
        yield user_id
    finally:
        _user_id_ctx.set(previous)
