"""Selection of the TaskService used by package pipelines.

The service is held in a context variable so that each event loop run, such
as one command line invocation or one test, tracks only its own tasks.
"""

from collections.abc import Iterator
import contextlib
import contextvars

from .service import TaskService, TaskServiceImpl

__all__: list[str] = []

_CURRENT: contextvars.ContextVar[TaskService | None] = contextvars.ContextVar(
    "gitpaq_task_service", default=None
)


def get_task_service() -> TaskService:
    """Return the service of the current context, installing one on first use."""
    if (service := _CURRENT.get()) is None:
        service = TaskServiceImpl()
        _CURRENT.set(service)
    return service


@contextlib.contextmanager
def task_service_context(
    service: TaskService | None = None,
) -> Iterator[TaskService]:
    """Use `service`, or a fresh one, for the duration of the block."""
    active = service or TaskServiceImpl()
    token = _CURRENT.set(active)
    try:
        yield active
    finally:
        _CURRENT.reset(token)
