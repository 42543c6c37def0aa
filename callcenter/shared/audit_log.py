"""
Immutable Audit Log - Tamper-evident record of credential access.

Every read, store, activation and deletion of a tenant's third-party
credentials is appended to a hash-chained JSONL file. Each entry embeds the
SHA-256 hash of the previous one, so editing or dropping a line breaks the
chain and is caught by verify_integrity().
"""

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from threading import Lock
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

GENESIS_HASH = "genesis"


def actor_for_client(client_id) -> str:
    return f"client-{client_id}"


def _hash_entry(entry: dict) -> str:
    canonical = json.dumps(entry, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ImmutableAuditLog:
    """
    Append-only, hash-chained audit log.

    Each line holds: timestamp, actor, action, resource_type, resource_id,
    result, metadata (never secrets), prev_hash and entry_hash. entry_hash
    covers every other field, prev_hash included.
    """

    def __init__(self, log_path: str):
        self._log_path = log_path
        self._lock = Lock()

        directory = os.path.dirname(log_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Continue an existing chain across restarts
        tail = None
        for tail in self._entries():
            pass
        self._last_hash = tail.get("entry_hash", GENESIS_HASH) if tail else GENESIS_HASH

    def record(
        self,
        actor: str,
        action: str,
        resource_type: str,
        resource_id: str,
        result: str = "ok",
        metadata: Optional[dict] = None,
    ) -> str:
        """Append an entry and return its hash."""
        with self._lock:
            entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "actor": actor,
                "action": action,
                "resource_type": resource_type,
                "resource_id": str(resource_id),
                "result": result,
                "metadata": metadata or {},
                "prev_hash": self._last_hash,
            }
            entry["entry_hash"] = _hash_entry(entry)

            with open(self._log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, separators=(",", ":")) + "\n")

            self._last_hash = entry["entry_hash"]
            return self._last_hash

    def _entries(self) -> Iterator[dict]:
        if not os.path.exists(self._log_path):
            return
        with open(self._log_path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError:
                    logger.error(f"Corrupt audit log line {line_no}: {line[:100]}")

    def read_all(self) -> list[dict]:
        return list(self._entries())

    def read_for_actor(self, actor: str) -> list[dict]:
        return [e for e in self._entries() if e.get("actor") == actor]

    def get_entry_count(self) -> int:
        return sum(1 for _ in self._entries())

    def first_broken_entry(self) -> Optional[int]:
        """Index of the first entry whose link or hash does not check out, or None."""
        expected_prev = GENESIS_HASH
        for index, entry in enumerate(self._entries()):
            stored = entry.pop("entry_hash", "")
            if entry.get("prev_hash") != expected_prev:
                logger.error(f"Audit chain broken at entry {index}: prev_hash does not match")
                return index
            if _hash_entry(entry) != stored:
                logger.error(f"Audit chain broken at entry {index}: entry was modified")
                return index
            expected_prev = stored
        return None

    def verify_integrity(self) -> bool:
        return self.first_broken_entry() is None
