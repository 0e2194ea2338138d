"""Shared fixtures for sapling tests."""

import textwrap
from pathlib import Path
from typing import Dict

import pytest

from sapling.core.types import Settings


@pytest.fixture
def write_project(tmp_path):
    """
    Write a small project under tmp_path.

    Usage:
        root = write_project({"src/App.jsx": "export default function App() {}"})
    """

    def _write(files: Dict[str, str]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip())
        return tmp_path

    return _write


@pytest.fixture
def settings(tmp_path):
    return Settings(app_root=str(tmp_path))


@pytest.fixture
def react_app(write_project):
    """index.jsx -> App.jsx -> (Header.jsx, utils.js); Header.jsx -> utils.js"""
    return write_project({
        "src/index.jsx": """
            import React from 'react';
            import { render } from 'react-dom';
            import App from './App';

            render(<App />, document.getElementById('root'));
        """,
        "src/App.jsx": """
            import React from 'react';
            import Header from './Header';
            import { formatTitle } from './utils';
            import './App.css';

            export default function App() {
              return <Header title={formatTitle('home')} onClose={() => null} />;
            }
        """,
        "src/Header.jsx": """
            import React from 'react';
            import { formatTitle } from './utils';

            const Header = ({ title }) => <h1>{formatTitle(title)}</h1>;

            export default Header;
        """,
        "src/utils.js": """
            export function formatTitle(value) {
              return value.toUpperCase();
            }
        """,
        "src/App.css": """
            h1 { color: green; }
        """,
    })
