"""Task tracking for package pipelines.

Every per-package pipeline of a batch runs as a tracked task so that a batch
can wait for all of its work, including best-effort background work such as
changelog capture, before returning.
"""

from .context import task_service_context, get_task_service
from .service import TaskService

__all__ = ["get_task_service", "task_service_context", "TaskService"]
