from __future__ import annotations

import pytest
import yaml

from codeshelf_backend.projects.templates import (
    BUILTIN_TEMPLATES,
    get_template,
    load_templates,
)
from codeshelf_backend.state import ActiveProjectPointer


def test_builtin_templates_are_used_without_catalog(tmp_path):
    templates = load_templates(tmp_path / "missing.yaml")

    assert [template.id for template in templates] == ["react-vite", "vanilla-vite"]
    for template in templates:
        assert template.entry_file in template.files


def test_load_templates_from_yaml(tmp_path):
    catalog = tmp_path / "templates.yaml"
    catalog.write_text(
        yaml.safe_dump(
            {
                "templates": [
                    {
                        "id": "static-site",
                        "framework": "vanilla",
                        "files": {"index.html": "<h1>Hi</h1>", "app.js": ""},
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    (template,) = load_templates(catalog)

    assert template.name == "Static Site"
    assert template.entry_file == "index.html"
    assert template.files["index.html"] == "<h1>Hi</h1>"


def test_load_templates_rejects_unknown_framework(tmp_path):
    catalog = tmp_path / "templates.yaml"
    catalog.write_text(
        yaml.safe_dump(
            {"templates": [{"id": "x", "framework": "svelte", "files": {"a": ""}}]}
        ),
        encoding="utf-8",
    )

    with pytest.raises(ValueError):
        load_templates(catalog)


def test_get_template():
    assert get_template("react-vite").framework == "react"
    assert get_template("unknown") is None
    assert get_template("react-vite", []) is None
    assert get_template("vanilla-vite", BUILTIN_TEMPLATES).entry_file == "src/main.js"


def test_pointer_round_trip(pointer):
    assert pointer.get() is None

    pointer.set("abc")
    assert pointer.get() == "abc"

    pointer.clear()
    assert pointer.get() is None


def test_pointer_tolerates_corrupt_state(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    assert ActiveProjectPointer(path).get() is None


def test_pointer_ignores_unexpected_payload(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("[1, 2]", encoding="utf-8")

    assert ActiveProjectPointer(path).get() is None
