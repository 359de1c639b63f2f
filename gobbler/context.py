"""Context variables for tracing a single gobbler invocation"""

from contextvars import ContextVar
from uuid import uuid4

run_id: ContextVar[str] = ContextVar('run_id', default='')


def set_run_id(rid: str = '') -> str:
    if not rid:
        rid = uuid4().hex[:12]
    run_id.set(rid)
    return rid


def get_run_id() -> str:
    return run_id.get('')
