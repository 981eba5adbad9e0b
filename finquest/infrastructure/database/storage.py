"""StoragePort adapter persisting keyed blobs in the stored_blob table"""

import uuid
from typing import Optional
from sqlalchemy.orm import Session
from finquest.infrastructure.database.models import StoredBlob


class DatabaseStorage:
    """Per-user blob storage; writes are flushed but committed by the caller"""

    def __init__(self, db: Session, owner_id: uuid.UUID):
        self.db = db
        self.owner_id = owner_id

    def _row(self, key: str) -> Optional[StoredBlob]:
        return (
            self.db.query(StoredBlob)
            .filter(StoredBlob.owner_id == self.owner_id, StoredBlob.key == key)
            .first()
        )

    def read(self, key: str) -> Optional[str]:
        row = self._row(key)
        return row.value if row else None

    def write(self, key: str, blob: str) -> None:
        row = self._row(key)
        if row is None:
            self.db.add(StoredBlob(owner_id=self.owner_id, key=key, value=blob))
        else:
            row.value = blob
        self.db.flush()
