"""Document store: content-addressed text blobs for skill files."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import Protocol

from skillhub.errors import DocumentNotFoundError

_REF_RE = re.compile(r"^[0-9a-f]{64}$")


def content_ref(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class DocumentStore(Protocol):
    def fetch_text(self, storage_ref: str) -> str: ...

    def put_text(self, text: str) -> str: ...


class FileDocumentStore:
    """Stores documents under ``root/<ab>/<sha256>``, keyed by content hash."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def put_text(self, text: str) -> str:
        ref = content_ref(text)
        path = self._path(ref)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(text.encode("utf-8"))
        return ref

    def fetch_text(self, storage_ref: str) -> str:
        if not _REF_RE.match(storage_ref):
            raise DocumentNotFoundError("File missing in storage")
        path = self._path(storage_ref)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise DocumentNotFoundError("File missing in storage") from None

    def exists(self, storage_ref: str) -> bool:
        return bool(_REF_RE.match(storage_ref)) and self._path(storage_ref).exists()

    def _path(self, ref: str) -> Path:
        return self._root / ref[:2] / ref
