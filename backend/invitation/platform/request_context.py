from contextvars import ContextVar
from typing import Optional

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_invite_batch_id_ctx: ContextVar[Optional[str]] = ContextVar("invite_batch_id", default=None)


def set_request_id(request_id: str):
    return _request_id_ctx.set(request_id)


def get_request_id() -> Optional[str]:
    return _request_id_ctx.get()


def set_invite_batch_id(batch_id: Optional[str]):
    return _invite_batch_id_ctx.set(batch_id)


def reset_invite_batch_id(token) -> None:
    _invite_batch_id_ctx.reset(token)


def get_invite_batch_id() -> Optional[str]:
    return _invite_batch_id_ctx.get()
