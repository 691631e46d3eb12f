"""Repository for the append-only sync result log."""

from __future__ import annotations

from trailsync.models import SyncResult
from trailsync.repositories.base import Repository


class SyncResultRepository(Repository[SyncResult]):
    model_class = SyncResult
