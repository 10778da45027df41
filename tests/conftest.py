"""Shared test fixtures for umlpress."""

from pathlib import Path

import pytest

from tests.fakes import CONVERTER
from umlpress.contexts.diagram import Diagram
from umlpress.utils.config import ConfigProvider, RenderSettings


@pytest.fixture
def jar_file(tmp_path):
    jar = tmp_path / "engine" / "plantuml.jar"
    jar.parent.mkdir()
    jar.write_bytes(b"PK")
    return jar


@pytest.fixture
def render_settings(jar_file):
    return RenderSettings(
        java="/usr/bin/java",
        jar=jar_file,
        converter=CONVERTER,
        install_location=jar_file.parent,
    )


@pytest.fixture
def config(render_settings):
    return ConfigProvider(settings=render_settings)


@pytest.fixture
def make_diagram(tmp_path):
    """Build a diagram file with the given number of pages."""

    def _make(page_count: int = 3, name: str = "sequence") -> Diagram:
        pages = "\nnewpage\n".join(f"Alice -> Bob : step {i}" for i in range(page_count))
        source = tmp_path / "docs" / f"{name}.puml"
        source.parent.mkdir(parents=True, exist_ok=True)
        source.write_text(f"@startuml {name}\n{pages}\n@enduml\n", encoding="utf-8")
        return Diagram.from_file(source)

    return _make


@pytest.fixture
def out_dir(tmp_path) -> Path:
    return tmp_path / "out"
