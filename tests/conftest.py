# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from codeshelf_backend.database import create_db_engine, create_session_factory
from codeshelf_backend.projects import ArchiveCodec, ProjectStore, ProjectTemplate
from codeshelf_backend.state import ActiveProjectPointer

MAX_PROJECTS = 3


@pytest.fixture()
def single_file_template() -> ProjectTemplate:
    return ProjectTemplate(
        id="single",
        name="Single",
        framework="vanilla",
        entry_file="A",
        files={"A": "1"},
    )


@pytest.fixture()
def three_file_template() -> ProjectTemplate:
    return ProjectTemplate(
        id="three",
        name="Three",
        framework="react",
        entry_file="src/App.tsx",
        files={
            "index.html": "<div id='root'></div>",
            "src/App.tsx": "export default function App() { return null; }",
            "src/style.css": "body { margin: 0; }",
        },
    )


@pytest.fixture()
def engine(tmp_path: Path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'codeshelf.db'}")
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine, single_file_template, three_file_template) -> ProjectStore:
    return ProjectStore(
        create_session_factory(engine),
        max_projects=MAX_PROJECTS,
        templates=[single_file_template, three_file_template],
    )


@pytest.fixture()
def codec(store: ProjectStore) -> ArchiveCodec:
    return ArchiveCodec(store)


@pytest.fixture()
def pointer(tmp_path: Path) -> ActiveProjectPointer:
    return ActiveProjectPointer(tmp_path / "state" / "active.json")
