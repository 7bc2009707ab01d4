"""Unit tests for the JSON document store."""
from __future__ import annotations

import json
import stat

import pytest

from trustpolicy.utils.json_store import (
    DocumentStoreError,
    JsonDocumentStore,
    contains_document,
    merge_document,
    remove_document,
)

ENTERPRISE = {"policies": {"Certificates": {"ImportEnterpriseRoots": True}}}


class TestMergeDocument:
    def test_merges_nested_objects(self):
        target = {"policies": {"DisableAppUpdate": True}}
        merge_document(target, ENTERPRISE)
        assert target == {
            "policies": {
                "DisableAppUpdate": True,
                "Certificates": {"ImportEnterpriseRoots": True},
            }
        }

    def test_arrays_behave_as_sets(self):
        target = {"Install": ["a.crt", "b.crt"]}
        merge_document(target, {"Install": ["b.crt", "c.crt"]})
        assert target == {"Install": ["a.crt", "b.crt", "c.crt"]}

    def test_scalars_are_replaced(self):
        target = {"ImportEnterpriseRoots": False}
        merge_document(target, {"ImportEnterpriseRoots": True})
        assert target == {"ImportEnterpriseRoots": True}

    def test_source_is_not_aliased(self):
        source = {"Install": ["a.crt"]}
        target = merge_document({}, source)
        target["Install"].append("b.crt")
        assert source == {"Install": ["a.crt"]}


class TestRemoveDocument:
    def test_removes_array_items_and_prunes(self):
        target = {"policies": {"Certificates": {"Install": ["/opt/x/auth/root-ca.crt"]}}}
        remove_document(target, {"policies": {"Certificates": {"Install": ["/opt/x/auth/root-ca.crt"]}}})
        assert target == {}

    def test_keeps_unrelated_entries(self):
        target = {
            "policies": {
                "Certificates": {"Install": ["other.crt", "ours.crt"]},
                "DisableTelemetry": True,
            }
        }
        remove_document(target, {"policies": {"Certificates": {"Install": ["ours.crt"]}}})
        assert target == {
            "policies": {
                "Certificates": {"Install": ["other.crt"]},
                "DisableTelemetry": True,
            }
        }

    def test_scalars_removed_only_when_equal(self):
        target = {"ImportEnterpriseRoots": False}
        remove_document(target, {"ImportEnterpriseRoots": True})
        assert target == {"ImportEnterpriseRoots": False}

    def test_missing_keys_ignored(self):
        assert remove_document({}, ENTERPRISE) == {}


class TestContainsDocument:
    def test_subset_is_contained(self):
        target = {"policies": {"Certificates": {"ImportEnterpriseRoots": True, "Install": ["a"]}}}
        assert contains_document(target, ENTERPRISE)

    def test_value_mismatch(self):
        target = {"policies": {"Certificates": {"ImportEnterpriseRoots": False}}}
        assert not contains_document(target, ENTERPRISE)

    def test_array_subset(self):
        assert contains_document({"Install": ["a", "b"]}, {"Install": ["b"]})
        assert not contains_document({"Install": ["a"]}, {"Install": ["b"]})


class TestJsonDocumentStore:
    def setup_method(self):
        self.store = JsonDocumentStore()

    def test_write_creates_file(self, tmp_path):
        path = tmp_path / "policies.json"
        self.store.write(path, ENTERPRISE)
        assert json.loads(path.read_text()) == ENTERPRISE

    def test_write_requires_parent(self, tmp_path):
        with pytest.raises(DocumentStoreError):
            self.store.write(tmp_path / "missing" / "policies.json", ENTERPRISE)

    def test_write_merges_existing(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_text(json.dumps({"policies": {"DisableTelemetry": True}}))
        self.store.write(path, ENTERPRISE)
        assert json.loads(path.read_text())["policies"] == {
            "DisableTelemetry": True,
            "Certificates": {"ImportEnterpriseRoots": True},
        }

    def test_overwrite_discards_existing(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_text(json.dumps({"policies": {"DisableTelemetry": True}}))
        self.store.write(path, ENTERPRISE, overwrite=True)
        assert json.loads(path.read_text()) == ENTERPRISE

    def test_write_is_idempotent(self, tmp_path):
        path = tmp_path / "policies.json"
        self.store.write(path, ENTERPRISE)
        first = path.read_bytes()
        self.store.write(path, ENTERPRISE)
        assert path.read_bytes() == first

    def test_delete_mode(self, tmp_path):
        path = tmp_path / "policies.json"
        self.store.write(path, ENTERPRISE)
        content = self.store.write(path, ENTERPRISE, delete=True)
        assert content == {}
        assert json.loads(path.read_text()) == {}

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_text("{not json")
        with pytest.raises(DocumentStoreError, match="malformed"):
            self.store.write(path, ENTERPRISE)
        assert path.read_text() == "{not json"

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_text("[1, 2]")
        with pytest.raises(DocumentStoreError):
            self.store.read(path)

    def test_invalid_utf8_raises(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_bytes(b'{"policies": "\xff\xfe"}')
        with pytest.raises(DocumentStoreError, match="UTF-8"):
            self.store.read(path)
        assert not self.store.contains(path, ENTERPRISE)

    def test_empty_file_reads_as_empty_object(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_text("")
        assert self.store.read(path) == {}

    def test_no_temporary_files_left(self, tmp_path):
        path = tmp_path / "policies.json"
        self.store.write(path, ENTERPRISE)
        assert [p.name for p in tmp_path.iterdir()] == ["policies.json"]

    def test_file_mode(self, tmp_path):
        path = tmp_path / "policies.json"
        self.store.write(path, ENTERPRISE)
        assert stat.S_IMODE(path.stat().st_mode) == 0o644

        path.chmod(0o640)
        self.store.write(path, ENTERPRISE, delete=True)
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_contains(self, tmp_path):
        path = tmp_path / "policies.json"
        assert not self.store.contains(path, ENTERPRISE)
        self.store.write(path, ENTERPRISE)
        assert self.store.contains(path, ENTERPRISE)

    def test_contains_malformed_is_false(self, tmp_path):
        path = tmp_path / "policies.json"
        path.write_text("garbage")
        assert not self.store.contains(path, ENTERPRISE)
