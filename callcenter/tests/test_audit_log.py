"""
Tests for the hash-chained credential audit log.
"""

import json
import os

from callcenter.shared.audit_log import GENESIS_HASH, ImmutableAuditLog, actor_for_client


class TestImmutableAuditLog:
    def test_record_appends_chained_entries(self, audit_log):
        first = audit_log.record("client-1", "STORE", "credential", "ecommerce/shopify")
        audit_log.record("client-1", "READ", "credential", "ecommerce/shopify")

        entries = audit_log.read_all()
        assert len(entries) == 2
        assert entries[0]["prev_hash"] == GENESIS_HASH
        assert entries[1]["prev_hash"] == first
        assert audit_log.verify_integrity()
        assert audit_log.first_broken_entry() is None

    def test_metadata_is_stored(self, audit_log):
        audit_log.record("client-2", "DELETE", "credential", "fintech/stripe", metadata={"credential_id": 7})
        assert audit_log.read_all()[0]["metadata"] == {"credential_id": 7}

    def test_tampering_breaks_integrity(self, audit_log, tmp_dir):
        audit_log.record("client-1", "STORE", "credential", "a")
        audit_log.record("client-1", "READ", "credential", "a")

        path = os.path.join(tmp_dir, "audit.jsonl")
        with open(path, encoding="utf-8") as f:
            lines = f.readlines()
        entry = json.loads(lines[0])
        entry["action"] = "READ"
        lines[0] = json.dumps(entry, separators=(",", ":")) + "\n"
        with open(path, "w", encoding="utf-8") as f:
            f.writelines(lines)

        assert not audit_log.verify_integrity()
        assert audit_log.first_broken_entry() == 0

    def test_dropped_line_breaks_integrity(self, audit_log, tmp_dir):
        for action in ("STORE", "ACTIVATE", "READ"):
            audit_log.record("client-1", action, "credential", "a")

        path = os.path.join(tmp_dir, "audit.jsonl")
        with open(path, encoding="utf-8") as f:
            lines = f.readlines()
        with open(path, "w", encoding="utf-8") as f:
            f.writelines([lines[0], lines[2]])

        assert not audit_log.verify_integrity()
        assert audit_log.first_broken_entry() == 1

    def test_reopen_continues_chain(self, tmp_dir):
        path = os.path.join(tmp_dir, "audit.jsonl")
        ImmutableAuditLog(path).record("client-1", "STORE", "credential", "a")

        reopened = ImmutableAuditLog(path)
        reopened.record("client-1", "READ", "credential", "a")

        assert reopened.get_entry_count() == 2
        assert reopened.verify_integrity()

    def test_read_for_actor(self, audit_log):
        audit_log.record(actor_for_client(1), "STORE", "credential", "a")
        audit_log.record(actor_for_client(2), "STORE", "credential", "b")
        entries = audit_log.read_for_actor("client-2")
        assert [e["resource_id"] for e in entries] == ["b"]

    def test_missing_file_reads_empty(self, tmp_dir):
        log = ImmutableAuditLog(os.path.join(tmp_dir, "nested", "audit.jsonl"))
        assert log.read_all() == []
        assert log.verify_integrity()
