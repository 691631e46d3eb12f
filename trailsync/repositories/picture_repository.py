"""Repository for Picture records."""

from __future__ import annotations

from trailsync.models import Picture
from trailsync.repositories.base import Repository


class PictureRepository(Repository[Picture]):
    """Picture records keyed by the vendor photo id.

    ``exists_by_key`` is the dedup check of the sync job: a photo whose id
    is already stored is never downloaded again.
    """

    model_class = Picture
    key_field = "photo_id"
