"""arq worker settings module.

Import path for arq CLI: arq codesync.workers.settings.WorkerSettings
"""

from __future__ import annotations

from codesync.workers.refresh_worker import WorkerSettings

__all__ = ["WorkerSettings"]
