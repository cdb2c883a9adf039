"""Binary media storage on GridFS.

Objects are addressed by a timestamp-prefixed path, e.g.
`chat_media/1718000000000_photo.jpg`.
"""
import logging
from typing import Optional

import gridfs

logger = logging.getLogger(__name__)


class MediaRepository:
    """GridFS-backed object store."""

    def __init__(self, db=None, bucket_name="media", fs=None):
        self.bucket_name = bucket_name
        self.fs = fs if fs is not None else gridfs.GridFS(db, collection=bucket_name)

    def put(self, path: str, data: bytes, content_type: str) -> str:
        self.fs.put(data, filename=path, content_type=content_type)
        logger.info(f"Stored media object {path} ({len(data)} bytes)")
        return path

    def open(self, path: str) -> Optional[object]:
        """Latest stored version of `path`, or None."""
        try:
            return self.fs.get_last_version(filename=path)
        except gridfs.errors.NoFile:
            return None
