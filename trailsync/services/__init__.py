"""Clients and services used by the sync job."""

from .notification import NotificationDelivery, SlackNotifier
from .object_storage import (
    MIME_JPEG,
    GCSObjectStorage,
    LocalObjectStorage,
    ObjectStorage,
    StoredObject,
    get_object_storage,
)
from .record_store import RecordStore
from .spypoint_client import SpypointClient, SpypointSession
from .thumbnail_generator import make_thumbnail

__all__ = [
    "MIME_JPEG",
    "GCSObjectStorage",
    "LocalObjectStorage",
    "NotificationDelivery",
    "ObjectStorage",
    "RecordStore",
    "SlackNotifier",
    "SpypointClient",
    "SpypointSession",
    "StoredObject",
    "get_object_storage",
    "make_thumbnail",
]
