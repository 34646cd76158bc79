from __future__ import annotations

import pytest

from codeshelf_backend.errors import ProjectNotFound, TemplateNotFound
from codeshelf_backend.models import Project, ProjectFile, Snapshot
from codeshelf_backend.database import session_scope

from .conftest import MAX_PROJECTS


def _files(store, project_id):
    return {record.path: record.content for record in store.list_files(project_id)}


def test_create_uses_template_metadata(store, three_file_template):
    project = store.create(three_file_template)

    assert project.name == "Three Project"
    assert project.framework == "react"
    assert project.entry_file == "src/App.tsx"
    assert project.snapshot_index == 0
    assert _files(store, project.id) == three_file_template.files


def test_create_trims_explicit_name(store, single_file_template):
    project = store.create(single_file_template, "  My app  ")

    assert project.name == "My app"


def test_blank_name_falls_back_to_template_name(store, single_file_template):
    project = store.create(single_file_template, "   ")

    assert project.name == "Single Project"


def test_create_from_unknown_template_id_raises(store):
    with pytest.raises(TemplateNotFound):
        store.create_from_template_id("does-not-exist")


def test_create_from_template_id(store):
    project = store.create_from_template_id("three", "Shop")

    assert project.name == "Shop"
    assert len(store.list_files(project.id)) == 3


def test_cap_is_enforced_for_create_and_duplicate(store, single_file_template):
    created = [store.create(single_file_template) for _ in range(MAX_PROJECTS)]
    assert all(project is not None for project in created)

    assert store.create(single_file_template) is None
    assert store.duplicate(created[0].id) is None
    assert store.count() == MAX_PROJECTS


def test_list_orders_by_most_recent_update(store, single_file_template):
    first = store.create(single_file_template, "first")
    second = store.create(single_file_template, "second")

    store.update_file(first.id, "A", "touched")

    assert [project.id for project in store.list()] == [first.id, second.id]


def test_duplicate_copies_files_with_fresh_history(store, three_file_template):
    source = store.create(three_file_template)
    store.update_file(source.id, "index.html", "<p>edited</p>")

    copy = store.duplicate(source.id)

    assert copy.id != source.id
    assert copy.name == f"{source.name} Copy"
    assert copy.snapshot_index == 0
    assert _files(store, copy.id) == _files(store, source.id)
    history = store.history(copy.id)
    assert [(s.order, s.label) for s in history] == [(0, "Duplicated project")]
    assert len(history[0].files) == 3


def test_mutating_duplicate_leaves_source_untouched(store, three_file_template):
    source = store.create(three_file_template)
    source_files = _files(store, source.id)
    copy = store.duplicate(source.id)

    store.update_file(copy.id, "index.html", "changed")
    store.delete_file(copy.id, "src/style.css")
    store.undo(copy.id)

    assert _files(store, source.id) == source_files
    assert [s.order for s in store.history(source.id)] == [0]
    assert store.get(source.id).snapshot_index == 0


def test_duplicate_missing_project_returns_none(store):
    assert store.duplicate("missing") is None


def test_rename_project(store, single_file_template):
    project = store.create(single_file_template)

    store.rename(project.id, "  Renamed  ")

    assert store.get(project.id).name == "Renamed"


def test_rename_to_blank_is_noop(store, single_file_template):
    project = store.create(single_file_template, "Keep")

    store.rename(project.id, "   ")

    assert store.get(project.id).name == "Keep"


def test_rename_missing_project_raises(store):
    with pytest.raises(ProjectNotFound):
        store.rename("missing", "name")


def test_delete_cascades_to_files_and_snapshots(store, three_file_template):
    project = store.create(three_file_template)
    store.update_file(project.id, "index.html", "x")
    other = store.create(three_file_template)

    store.delete(project.id)

    assert store.get(project.id) is None
    with session_scope(store.session_factory) as session:
        assert session.query(ProjectFile).filter_by(project_id=project.id).count() == 0
        assert session.query(Snapshot).filter_by(project_id=project.id).count() == 0
        assert session.query(Project).count() == 1
    assert len(store.list_files(other.id)) == 3


def test_delete_frees_capacity(store, single_file_template):
    projects = [store.create(single_file_template) for _ in range(MAX_PROJECTS)]

    store.delete(projects[0].id)

    assert store.create(single_file_template) is not None


def test_delete_missing_project_is_noop(store):
    store.delete("missing")


def test_resolve_active_prefers_pointer(store, pointer, single_file_template):
    first = store.create(single_file_template, "first")
    store.create(single_file_template, "second")
    pointer.set(first.id)

    assert store.resolve_active(pointer).id == first.id


def test_resolve_active_falls_back_to_most_recent(store, pointer, single_file_template):
    store.create(single_file_template, "first")
    second = store.create(single_file_template, "second")
    pointer.set("deleted-project")

    assert store.resolve_active(pointer).id == second.id


def test_resolve_active_without_projects(store, pointer):
    assert store.resolve_active(pointer) is None
