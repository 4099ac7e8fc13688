"""Persistence for omikuji and message records."""

from omikuji.storage.database import create_db, open_store
from omikuji.storage.models import Base, Message, Omikuji, RecordKind, Slip, model_for
from omikuji.storage.repository import SlipRepository
from omikuji.storage.store import RecordListing, RecordStore

__all__ = [
    "Base",
    "Message",
    "Omikuji",
    "RecordKind",
    "RecordListing",
    "RecordStore",
    "Slip",
    "SlipRepository",
    "create_db",
    "model_for",
    "open_store",
]
