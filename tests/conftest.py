"""Shared fixtures for genbase tests."""

import textwrap

import pytest

from genbase.config import BuildContext, ParserConfig


@pytest.fixture
def write_go(tmp_path):
    """Write dedented Go source files under tmp_path and return their paths."""

    def _write(name, content, directory=None):
        base = directory or tmp_path
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def linux_context(tmp_path):
    """Deterministic build context independent of the host and environment."""
    return BuildContext(
        goos="linux",
        goarch="amd64",
        cgo_enabled=True,
        build_tags=[],
        goroot=None,
        gopath=[str(tmp_path / "gopath")],
    )


@pytest.fixture
def parser_config(linux_context):
    return ParserConfig(skip_semantics_check=False, build=linux_context)
