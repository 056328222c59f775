# ishanya/services/storage.py
from __future__ import annotations

import hashlib
import logging
import time
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Dict, List, Tuple

from itsdangerous import BadData, URLSafeSerializer

from ishanya.core.config import settings

log = logging.getLogger("storage")

REPORTS_PREFIX = "student-reports"


class StorageError(Exception):
    pass


class ObjectNotFound(StorageError):
    pass


def safe_filename(name: str) -> str:
    base = PurePosixPath((name or "").replace("\\", "/")).name
    return "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in base).lstrip(".")


def report_prefix(student_id) -> str:
    return f"{REPORTS_PREFIX}/{student_id}"


def report_key(student_id, filename: str, now_ms: int | None = None) -> str:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{report_prefix(student_id)}/{stamp}-{safe_filename(filename)}"


class LocalObjectStorage:
    """
    One bucket on the local filesystem: <root>/<bucket>/<key>.
    Signed URLs carry the key and an expiry timestamp.
    """

    def __init__(self, root: str | Path, bucket: str, secret: str):
        self.bucket = bucket
        self.base = (Path(root) / bucket).resolve()
        self._signer = URLSafeSerializer(secret, salt=f"storage:{bucket}")

    def _path(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or any(p in ("..", "") for p in parts) or key.startswith("/"):
            raise StorageError(f"Invalid object key: {key!r}")
        p = (self.base / Path(*parts)).resolve()
        if self.base not in p.parents:
            raise StorageError(f"Invalid object key: {key!r}")
        return p

    def upload(self, key: str, data: bytes) -> str:
        p = self._path(key)
        if p.exists():
            raise StorageError("The resource already exists")
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        log.info("Stored %s/%s (%d bytes)", self.bucket, key, len(data))
        return key

    def list(self, prefix: str) -> List[Dict]:
        folder = self._path(prefix)
        if not folder.is_dir():
            return []
        out = []
        for f in sorted(folder.iterdir()):
            if not f.is_file():
                continue
            st = f.stat()
            out.append({
                "name": f.name,
                "id": hashlib.sha1(f"{prefix}/{f.name}".encode("utf-8")).hexdigest(),
                "created_at": datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat(),
                "size": st.st_size,
            })
        return out

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def create_signed_url(self, key: str, expires_in: int) -> str:
        if not self.exists(key):
            raise ObjectNotFound(f"Object not found: {key}")
        token = self._signer.dumps({"k": key, "exp": int(time.time()) + int(expires_in)})
        return f"/api/storage/signed/{token}"

    def read_signed(self, token: str) -> Tuple[str, bytes]:
        try:
            payload = self._signer.loads(token)
        except BadData:
            raise StorageError("Invalid signature")
        if int(payload.get("exp", 0)) < int(time.time()):
            raise StorageError("Signed URL has expired")
        key = payload.get("k") or ""
        p = self._path(key)
        if not p.is_file():
            raise ObjectNotFound(f"Object not found: {key}")
        return key, p.read_bytes()


def get_storage() -> LocalObjectStorage:
    return LocalObjectStorage(settings.STORAGE_DIR, settings.STORAGE_BUCKET, settings.SIGNED_URL_SECRET)
