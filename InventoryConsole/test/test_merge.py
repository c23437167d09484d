"""
Unit tests for keyed snapshot reconciliation.
"""

from dataclasses import dataclass

from InventoryConsole.core.sync import reconcile, remove_where, replace_where


@dataclass
class Row:
    id: int
    value: str = ""
    pending: bool = False


def key(row: Row) -> int:
    return row.id


def ids(rows):
    return [r.id for r in rows]


class TestReconcile:
    """Tests for reconcile()."""

    def test_same_snapshot_is_identity(self):
        rows = [Row(1, "a"), Row(2, "b"), Row(3, "c")]
        assert reconcile(rows, list(rows), key=key) == rows

    def test_preserves_local_position(self):
        local = [Row(3, "c"), Row(1, "a"), Row(2, "b")]
        snapshot = [Row(1, "A"), Row(2, "B"), Row(3, "C")]

        merged = reconcile(local, snapshot, key=key)

        assert ids(merged) == [3, 1, 2]
        assert [r.value for r in merged] == ["C", "A", "B"]

    def test_appends_new_entries_in_snapshot_order(self):
        local = [Row(1)]
        snapshot = [Row(5), Row(1), Row(4)]

        assert ids(reconcile(local, snapshot, key=key)) == [1, 5, 4]

    def test_drops_entries_missing_from_snapshot(self):
        local = [Row(1), Row(2), Row(3)]

        assert ids(reconcile(local, [Row(3), Row(1)], key=key)) == [1, 3]

    def test_keeps_pending_entries(self):
        local = [Row(1), Row(99, "draft", pending=True)]

        merged = reconcile(local, [Row(1), Row(2)], key=key, is_pending=lambda r: r.pending)

        assert ids(merged) == [1, 99, 2]

    def test_partial_snapshot_keeps_everything_else(self):
        local = [Row(1, "a"), Row(2, "b"), Row(3, "c")]

        merged = reconcile(local, [Row(2, "B")], key=key, partial=True)

        assert ids(merged) == [1, 2, 3]
        assert merged[1].value == "B"

    def test_resolve_chooses_value(self):
        local = [Row(1, "local")]
        snapshot = [Row(1, "server")]

        merged = reconcile(local, snapshot, key=key, resolve=lambda mine, theirs: mine)

        assert merged[0].value == "local"

    def test_duplicate_snapshot_keys_keep_last_value(self):
        merged = reconcile([], [Row(1, "old"), Row(2), Row(1, "new")], key=key)

        assert ids(merged) == [1, 2]
        assert merged[0].value == "new"

    def test_inputs_not_modified(self):
        local = [Row(1), Row(2)]
        snapshot = [Row(2), Row(3)]

        reconcile(local, snapshot, key=key)

        assert ids(local) == [1, 2]
        assert ids(snapshot) == [2, 3]

    def test_empty_snapshot_clears_confirmed_entries(self):
        local = [Row(1), Row(2, pending=True)]

        assert ids(reconcile(local, [], key=key, is_pending=lambda r: r.pending)) == [2]


class TestHelpers:
    """Tests for replace_where() and remove_where()."""

    def test_replace_where_keeps_position(self):
        rows = [Row(1), Row(2), Row(3)]

        updated = replace_where(rows, key, 2, Row(20, "x"))

        assert ids(updated) == [1, 20, 3]
        assert ids(rows) == [1, 2, 3]

    def test_remove_where(self):
        assert ids(remove_where([Row(1), Row(2)], key, 1)) == [2]

    def test_remove_missing_key_is_noop(self):
        assert ids(remove_where([Row(1)], key, 7)) == [1]
