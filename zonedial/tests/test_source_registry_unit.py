from __future__ import annotations

import pytest

from zonedial.core.actions import DialIdentity, DialTurnEvent, RotationDirection
from zonedial.core.sources import AutoDialSource, EvdevDialSource, HidrawDialSource, SourceDisconnected, select_source
from zonedial.core.sources.registry import SourceSpec


class _StubSource:
    def __init__(self, name: str, path=None, *, requires_grab: bool = False):
        self.name = name
        self.path = path
        self.requires_grab = requires_grab
        self.opened: list[str] = []
        self.closed = 0
        self._open = False

    def locate(self):
        return self.path

    def open(self, path: str) -> None:
        self.opened.append(path)
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def read_events(self, timeout_s: float):
        return [DialTurnEvent(DialIdentity.LEFT, RotationDirection.CLOCKWISE)]

    def close(self) -> None:
        self.closed += 1
        self._open = False


def test_select_named_sources() -> None:
    assert isinstance(select_source(requested="hidraw"), HidrawDialSource)

    evdev_source = select_source(requested="evdev", device_name="my dial")
    assert isinstance(evdev_source, EvdevDialSource)
    assert evdev_source.device_name == "my dial"


def test_select_defaults_to_auto(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ZONEDIAL_SOURCE", raising=False)
    assert isinstance(select_source(), AutoDialSource)


def test_select_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ZONEDIAL_SOURCE", "EVDEV")
    assert isinstance(select_source(), EvdevDialSource)


def test_select_unknown_raises() -> None:
    with pytest.raises(ValueError):
        select_source(requested="serial")


def test_auto_prefers_first_source_that_locates() -> None:
    hid = _StubSource("hidraw", None)
    ev = _StubSource("evdev", "/dev/input/event7", requires_grab=True)
    specs = [SourceSpec("hidraw", lambda **_kw: hid), SourceSpec("evdev", lambda **_kw: ev)]

    auto = select_source(requested="auto", specs=specs)
    path = auto.locate()
    auto.open(path)

    assert path == "/dev/input/event7"
    assert ev.opened == ["/dev/input/event7"]
    assert hid.opened == []
    assert auto.requires_grab is True
    assert auto.is_open is True
    assert list(auto.read_events(0.1))

    auto.close()
    assert ev.closed == 1
    assert auto.is_open is False


def test_auto_switches_when_hidraw_reappears() -> None:
    hid = _StubSource("hidraw", None)
    ev = _StubSource("evdev", "/dev/input/event7", requires_grab=True)
    auto = AutoDialSource([hid, ev])

    auto.open(auto.locate())
    auto.close()

    hid.path = "/dev/hidraw2"
    auto.open(auto.locate())

    assert hid.opened == ["/dev/hidraw2"]
    assert auto.requires_grab is False


def test_auto_open_unlocated_path_raises() -> None:
    auto = AutoDialSource([_StubSource("hidraw", None)])
    assert auto.locate() is None
    with pytest.raises(SourceDisconnected):
        auto.open("/dev/hidraw0")
    with pytest.raises(SourceDisconnected):
        auto.read_events(0.1)
