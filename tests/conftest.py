# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from pyepubcheck.runtime.console import get_console_manager

_FAKE_VALIDATOR = '''#!{python}
import json
import pathlib
import sys
import time

BEHAVIOR = json.loads({behavior!r})
args = sys.argv[1:]
if BEHAVIOR.get("record"):
    pathlib.Path(BEHAVIOR["record"]).write_text(json.dumps(args), encoding="utf-8")
project = pathlib.Path(args[args.index("exp") + 1])
if BEHAVIOR.get("sleep"):
    time.sleep(BEHAVIOR["sleep"])
if "--json" in args and BEHAVIOR.get("result") is not None:
    target = pathlib.Path(args[args.index("--json") + 1])
    payload = BEHAVIOR["result"]
    target.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
if "--save" in args and BEHAVIOR.get("artifact"):
    name = project.name + ".epub"
    where = project / name if BEHAVIOR["artifact"] == "inside" else project.parent / name
    where.write_bytes(BEHAVIOR.get("content", "GENERATED").encode("utf-8"))
sys.stderr.write(BEHAVIOR.get("stderr", ""))
sys.exit(BEHAVIOR.get("exit", 0))
'''

FakeValidatorFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def _fresh_consoles() -> None:
    """Rebind cached Rich consoles to the current ``sys.stdout``."""

    get_console_manager().clear()


@pytest.fixture
def epub_project(tmp_path: Path) -> Path:
    """Create an expanded EPUB project directory named ``book``."""

    project = tmp_path / "book"
    (project / "EPUB").mkdir(parents=True)
    (project / "mimetype").write_text("application/epub+zip", encoding="utf-8")
    (project / "EPUB" / "content.xhtml").write_text(
        "\n".join(["<?xml version='1.0'?>", "<html>", "<head/>", "<body>", "x" * 40, "</body>"]),
        encoding="utf-8",
    )
    return project


@pytest.fixture
def fake_jar(tmp_path: Path) -> Path:
    """Return a placeholder validator jar; the fake launcher never opens it."""

    jar = tmp_path / "epubcheck.jar"
    jar.write_bytes(b"PK")
    return jar


@pytest.fixture
def fake_validator(tmp_path: Path) -> FakeValidatorFactory:
    """Return a factory writing executable launchers that imitate the validator."""

    if sys.platform == "win32":
        pytest.skip("fake launcher scripts require a POSIX shebang")

    counter = iter(range(1_000_000))

    def _factory(**behavior: Any) -> Path:
        script = tmp_path / f"fake-java-{next(counter)}"
        script.write_text(
            _FAKE_VALIDATOR.format(python=sys.executable, behavior=json.dumps(behavior)),
            encoding="utf-8",
        )
        script.chmod(0o755)
        return script

    return _factory
