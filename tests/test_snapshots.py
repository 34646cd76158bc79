from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from codeshelf_backend.database import session_scope
from codeshelf_backend.errors import ProjectNotFound, TransactionFailure


def _files(store, project_id):
    return {record.path: record.content for record in store.list_files(project_id)}


def _orders(store, project_id):
    return [snapshot.order for snapshot in store.history(project_id)]


def test_new_project_has_single_initial_snapshot(store, single_file_template):
    project = store.create(single_file_template)

    history = store.history(project.id)

    assert project.snapshot_index == 0
    assert [(s.order, s.label) for s in history] == [(0, "Initial template")]
    assert [state["path"] for state in history[0].files] == ["A"]


def test_history_grows_monotonically(store, single_file_template):
    project = store.create(single_file_template)

    for value in range(1, 6):
        store.update_file(project.id, "A", str(value))

    assert store.get(project.id).snapshot_index == 5
    assert _orders(store, project.id) == [0, 1, 2, 3, 4, 5]


def test_undo_walks_back_to_initial_state(store, single_file_template):
    project = store.create(single_file_template)
    store.update_file(project.id, "A", "2")
    assert store.get(project.id).snapshot_index == 1
    store.update_file(project.id, "A", "3")
    assert store.get(project.id).snapshot_index == 2

    assert store.undo(project.id) is True
    assert _files(store, project.id) == {"A": "2"}
    assert store.get(project.id).snapshot_index == 1

    assert store.undo(project.id) is True
    assert _files(store, project.id) == {"A": "1"}
    assert store.get(project.id).snapshot_index == 0

    assert store.undo(project.id) is False
    assert _files(store, project.id) == {"A": "1"}
    assert store.get(project.id).snapshot_index == 0


def test_undo_then_redo_restores_identical_file_set(store, three_file_template):
    project = store.create(three_file_template)
    store.create_file(project.id, "src/extra.ts", "export const x = 1;")
    store.update_file(project.id, "index.html", "<main></main>")
    before = _files(store, project.id)

    assert store.undo(project.id) is True
    assert store.redo(project.id) is True

    assert _files(store, project.id) == before
    assert store.get(project.id).snapshot_index == 2


def test_undo_removes_files_created_after_the_snapshot(store, single_file_template):
    project = store.create(single_file_template)
    store.create_file(project.id, "B", "b")

    store.undo(project.id)

    assert _files(store, project.id) == {"A": "1"}


def test_undo_restores_deleted_and_renamed_files(store, three_file_template):
    project = store.create(three_file_template)
    original = _files(store, project.id)
    store.delete_file(project.id, "src/style.css")
    store.rename_file(project.id, "index.html", "public/index.html")

    store.undo(project.id)
    store.undo(project.id)

    assert _files(store, project.id) == original


def test_undo_and_redo_do_not_change_history(store, single_file_template):
    project = store.create(single_file_template)
    store.update_file(project.id, "A", "2")
    store.update_file(project.id, "A", "3")

    store.undo(project.id)
    store.undo(project.id)
    store.redo(project.id)

    assert _orders(store, project.id) == [0, 1, 2]


def test_redo_at_tip_is_noop(store, single_file_template):
    project = store.create(single_file_template)
    store.update_file(project.id, "A", "2")

    assert store.redo(project.id) is False
    assert store.get(project.id).snapshot_index == 1
    assert _files(store, project.id) == {"A": "2"}


def test_new_commit_after_undo_truncates_redo_branch(store, single_file_template):
    project = store.create(single_file_template)
    store.update_file(project.id, "A", "2")
    store.update_file(project.id, "A", "3")
    store.undo(project.id)
    store.undo(project.id)

    store.update_file(project.id, "A", "branch")

    assert store.redo(project.id) is False
    assert _orders(store, project.id) == [0, 1]
    assert store.history(project.id)[1].files[0]["content"] == "branch"
    assert store.get(project.id).snapshot_index == 1


def test_restored_files_keep_snapshot_fingerprint(store, single_file_template):
    project = store.create(single_file_template)
    original = store.read_file(project.id, "A")
    store.update_file(project.id, "A", "2")

    store.undo(project.id)

    restored = store.read_file(project.id, "A")
    assert restored.fingerprint == original.fingerprint
    assert restored.content == original.content


def test_skip_snapshot_writes_draft_without_history(store, single_file_template):
    project = store.create(single_file_template)

    store.update_file(project.id, "A", "draft", skip_snapshot=True)

    assert store.read_file(project.id, "A").content == "draft"
    assert store.get(project.id).snapshot_index == 0
    assert _orders(store, project.id) == [0]


def test_custom_snapshot_label(store, single_file_template):
    project = store.create(single_file_template)

    store.update_file(project.id, "A", "2", snapshot_label="Formatted A")

    assert store.history(project.id)[-1].label == "Formatted A"


def test_undo_redo_on_missing_project_return_false(store):
    assert store.undo("missing") is False
    assert store.redo("missing") is False


def test_commit_on_missing_project_raises(store):
    with session_scope(store.session_factory) as session:
        with pytest.raises(ProjectNotFound):
            store.snapshots.commit(session, "missing", "label")


def test_failed_mutation_rolls_back_snapshot(store, single_file_template):
    project = store.create(single_file_template)

    with pytest.raises(RuntimeError):
        with session_scope(store.session_factory) as session:
            store.files.update(session, project.id, "A", "2")
            store.snapshots.commit(session, project.id, "Updated A")
            raise RuntimeError("boom")

    assert _files(store, project.id) == {"A": "1"}
    assert _orders(store, project.id) == [0]
    assert store.get(project.id).snapshot_index == 0


def test_storage_error_during_mutation_raises_transaction_failure(
    store, single_file_template, monkeypatch
):
    project = store.create(single_file_template)
    store.update_file(project.id, "A", "2")

    def fail(*args, **kwargs):
        raise IntegrityError("INSERT INTO snapshots", {}, Exception("constraint failed"))

    monkeypatch.setattr(store.snapshots, "commit", fail)
    with pytest.raises(TransactionFailure):
        store.update_file(project.id, "A", "3")
    monkeypatch.undo()

    assert _files(store, project.id) == {"A": "2"}
    assert _orders(store, project.id) == [0, 1]
    assert store.get(project.id).snapshot_index == 1
