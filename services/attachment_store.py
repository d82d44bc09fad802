import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

from services.errors import AttachmentStorageError

load_dotenv()

logger = logging.getLogger(__name__)

UPLOAD_ROOT = os.getenv("UPLOAD_ROOT", "uploads")


@dataclass(frozen=True)
class AttachmentUpload:
    """HTTP 層から受け取ったアップロード1件分"""
    file_name: str
    content: bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class AttachmentDescriptor:
    original_file_name: str
    storage_path: str
    content_type: Optional[str]


class AttachmentStore:
    """
    添付ファイルをディスクに保存する

    保存先は <upload_root>/<uuid4 hex><元の拡張子>
    """

    def __init__(self, upload_root: str | Path = UPLOAD_ROOT):
        self.upload_root = Path(upload_root)

    def _storage_path(self, file_name: str) -> Path:
        ext = Path(file_name or "").suffix
        return self.upload_root / f"{uuid.uuid4().hex}{ext}"

    def store(
        self,
        file_name: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> Optional[AttachmentDescriptor]:
        # 空ファイルはエラーにせずスキップ
        if not content:
            logger.debug("skipping empty upload %r", file_name)
            return None

        path = self._storage_path(file_name)
        try:
            self.upload_root.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise AttachmentStorageError(f"could not write attachment {file_name!r}: {e}") from e

        logger.debug("stored attachment %r -> %s (%d bytes)", file_name, path, len(content))
        return AttachmentDescriptor(
            original_file_name=file_name,
            storage_path=str(path),
            content_type=content_type,
        )

    def discard(self, paths: Iterable[str]) -> None:
        """保存済みファイルを消す（失敗しても例外は投げない）"""
        for path in paths:
            try:
                Path(path).unlink(missing_ok=True)
            except OSError:
                logger.warning("could not remove attachment file %s", path, exc_info=True)
