"""Starter templates that new projects are created from."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from ..models import FRAMEWORKS

REACT_APP = """import { useState } from 'react';

export default function App() {
  const [count, setCount] = useState(0);
  return (
    <main>
      <h1>Hello from React</h1>
      <button onClick={() => setCount((value) => value + 1)}>Count is {count}</button>
    </main>
  );
}
"""

REACT_MAIN = """import React from 'react';
import ReactDOM from 'react-dom/client';
import App from './App';

ReactDOM.createRoot(document.getElementById('root')!).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>
);
"""

REACT_INDEX = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <title>React App</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
  </body>
</html>
"""

VANILLA_INDEX = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <title>Vanilla App</title>
    <link rel="stylesheet" href="/src/style.css" />
  </head>
  <body>
    <div id="app"></div>
    <script type="module" src="/src/main.js"></script>
  </body>
</html>
"""

VANILLA_MAIN = """const app = document.querySelector('#app');
app.innerHTML = '<h1>Hello from vanilla JS</h1>';
"""

VANILLA_STYLE = """body {
  font-family: system-ui, sans-serif;
  margin: 2rem;
}
"""


@dataclass(slots=True)
class ProjectTemplate:
    """Shape of a catalog entry consumed by project creation."""

    id: str
    name: str
    framework: str
    entry_file: str
    files: dict[str, str] = field(default_factory=dict)
    description: str | None = None


BUILTIN_TEMPLATES: tuple[ProjectTemplate, ...] = (
    ProjectTemplate(
        id="react-vite",
        name="React + Vite",
        framework="react",
        entry_file="src/App.tsx",
        description="TypeScript React starter.",
        files={
            "index.html": REACT_INDEX,
            "src/main.tsx": REACT_MAIN,
            "src/App.tsx": REACT_APP,
        },
    ),
    ProjectTemplate(
        id="vanilla-vite",
        name="Vanilla + Vite",
        framework="vanilla",
        entry_file="src/main.js",
        description="Plain HTML, CSS and JavaScript starter.",
        files={
            "index.html": VANILLA_INDEX,
            "src/main.js": VANILLA_MAIN,
            "src/style.css": VANILLA_STYLE,
        },
    ),
)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _as_template(payload: dict[str, Any]) -> ProjectTemplate:
    framework = payload.get("framework", "vanilla")
    if framework not in FRAMEWORKS:
        raise ValueError(
            f"Template '{payload.get('id')}' has unsupported framework '{framework}'"
        )
    files = payload.get("files") or {}
    if not isinstance(files, dict) or not files:
        raise ValueError(f"Template '{payload.get('id')}' must define files")
    return ProjectTemplate(
        id=payload["id"],
        name=payload.get("name", payload["id"].replace("-", " ").title()),
        framework=framework,
        entry_file=payload.get("entry_file") or next(iter(files)),
        files={str(path): str(content) for path, content in files.items()},
        description=payload.get("description"),
    )


def load_templates(path: Path | None = None) -> list[ProjectTemplate]:
    """Load the template catalog, falling back to the built-in starters."""

    if path is None or not path.exists():
        return list(BUILTIN_TEMPLATES)
    payload = _load_yaml(path)
    entries: Iterable[dict[str, Any]] = payload.get("templates", [])
    return [_as_template(item) for item in entries]


def get_template(
    template_id: str, templates: Iterable[ProjectTemplate] | None = None
) -> ProjectTemplate | None:
    """Return the catalog entry with ``template_id`` if it exists."""

    for template in templates if templates is not None else BUILTIN_TEMPLATES:
        if template.id == template_id:
            return template
    return None


__all__ = ["BUILTIN_TEMPLATES", "ProjectTemplate", "get_template", "load_templates"]
