from __future__ import annotations

import os
import tempfile

import pytest


def _hardware_opted_in() -> bool:
    return os.environ.get("ZONEDIAL_ALLOW_HARDWARE") == "1"


# Safety default: during pytest, avoid touching the user's real config and lock.
if not _hardware_opted_in():
    os.environ.setdefault(
        "ZONEDIAL_CONFIG_DIR",
        tempfile.mkdtemp(prefix="zonedial-test-config-"),
    )
    os.environ.pop("ZONEDIAL_SOURCE", None)
    os.environ.pop("ZONEDIAL_CONFIG_PATH", None)


@pytest.fixture(autouse=True)
def _reset_log_throttle():
    from zonedial.core.logging_utils import reset_throttle

    reset_throttle()
    yield
    reset_throttle()


class FakeOutput:
    """Records virtual device calls as (kind, code, value) tuples."""

    def __init__(self, *, fail_on: str | None = None):
        self.calls: list[tuple] = []
        self.fail_on = fail_on

    def _maybe_fail(self, kind: str) -> None:
        if self.fail_on == kind:
            raise OSError(5, "Input/output error")

    def emit_key(self, key: int, pressed: bool) -> None:
        self._maybe_fail("key")
        self.calls.append(("key", key, bool(pressed)))

    def emit_relative(self, axis: int, amount: int) -> None:
        self._maybe_fail("rel")
        self.calls.append(("rel", axis, amount))

    def commit(self) -> None:
        self._maybe_fail("syn")
        self.calls.append(("syn",))


class FakeBacklight:
    def __init__(self):
        self.calls: list[tuple] = []

    def adjust(self, direction, step_percent):
        self.calls.append((direction, step_percent))
        return None


@pytest.fixture
def fake_output() -> FakeOutput:
    return FakeOutput()


@pytest.fixture
def fake_backlight() -> FakeBacklight:
    return FakeBacklight()


@pytest.fixture
def make_backlight(tmp_path):
    root = tmp_path / "class" / "backlight"
    root.mkdir(parents=True)

    def _make(name: str, *, brightness: int, max_brightness: int):
        d = root / name
        d.mkdir()
        (d / "brightness").write_text(f"{brightness}\n", encoding="utf-8")
        (d / "max_brightness").write_text(f"{max_brightness}\n", encoding="utf-8")
        return d

    _make.root = root  # type: ignore[attr-defined]
    return _make
