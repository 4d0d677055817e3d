"""
Tracing Context - Context management for request and task tracing.

Keeps a correlation id plus the repository and task being worked on in
contextvars, so every log line emitted while serving a request (or running a
Celery task) can be tied together. asyncio tasks copy the context on
creation, which means fan-out workers inherit the caller's correlation id.

Usage:
    TracingContext.set(correlation_id="abc-123", repo="github.com/a/b")
    ctx = TracingContext.get()          # picked up by JSONFormatter
    prefix = TracingContext.get_log_prefix()  # "[corr=abc-123]"
    TracingContext.clear()
"""

import uuid
from contextvars import ContextVar
from typing import Dict

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_repo: ContextVar[str] = ContextVar("repo", default="")
_task_name: ContextVar[str] = ContextVar("task_name", default="")


class TracingContext:
    """Context-local tracing fields."""

    @staticmethod
    def set(
        correlation_id: str = "",
        repo: str = "",
        task_name: str = "",
    ) -> None:
        """Set tracing context for current execution."""
        if correlation_id:
            _correlation_id.set(correlation_id)
        if repo:
            _repo.set(repo)
        if task_name:
            _task_name.set(task_name)

    @staticmethod
    def get() -> Dict[str, str]:
        """Get current tracing context as dict."""
        return {
            "correlation_id": _correlation_id.get(),
            "repo": _repo.get(),
            "task_name": _task_name.get(),
        }

    @staticmethod
    def get_correlation_id() -> str:
        return _correlation_id.get()

    @staticmethod
    def generate_correlation_id() -> str:
        """Generate a new correlation ID."""
        return str(uuid.uuid4())

    @staticmethod
    def get_log_prefix() -> str:
        corr_id = _correlation_id.get()
        if corr_id:
            return f"[corr={corr_id[:8]}]"
        return ""

    @staticmethod
    def clear() -> None:
        """Clear all tracing context."""
        _correlation_id.set("")
        _repo.set("")
        _task_name.set("")
