from __future__ import annotations

import select
from pathlib import Path

import pytest

from zonedial.core.actions import DialIdentity, RotationDirection
from zonedial.core.sources import HidrawDialSource, SourceDisconnected


class _FakeFile:
    def __init__(self, reports: list[bytes], *, error: OSError | None = None):
        self.reports = list(reports)
        self.error = error
        self.closed = False

    def fileno(self) -> int:
        return 42

    def read(self, size: int) -> bytes:
        if self.error is not None:
            raise self.error
        return self.reports.pop(0) if self.reports else b""


class _FakePoller:
    def __init__(self, results: list[list[tuple[int, int]]]):
        self.results = list(results)
        self.registered: list[tuple[int, int]] = []
        self.timeouts: list[int] = []

    def register(self, fd: int, mask: int) -> None:
        self.registered.append((fd, mask))

    def poll(self, timeout_ms: int):
        self.timeouts.append(timeout_ms)
        return self.results.pop(0) if self.results else []


def _source(fh: _FakeFile, poller: _FakePoller) -> HidrawDialSource:
    def _close():
        fh.closed = True

    fh.close = _close  # type: ignore[method-assign]
    return HidrawDialSource(opener=lambda _p: fh, poller_factory=lambda: poller)


def test_open_registers_fd_for_input(tmp_path: Path) -> None:
    fh, poller = _FakeFile([]), _FakePoller([])
    source = _source(fh, poller)

    source.open(str(tmp_path / "hidraw0"))

    assert source.is_open
    assert poller.registered == [(42, select.POLLIN)]


def test_register_failure_closes_the_opened_node(tmp_path: Path) -> None:
    fh = _FakeFile([])

    class _BadPoller(_FakePoller):
        def register(self, fd: int, mask: int) -> None:
            raise OSError(22, "Invalid argument")

    source = _source(fh, _BadPoller([]))

    with pytest.raises(OSError):
        source.open(str(tmp_path / "hidraw0"))

    assert fh.closed is True
    assert source.is_open is False


def test_read_decodes_dial_report(tmp_path: Path) -> None:
    node = tmp_path / "hidraw0"
    node.touch()
    fh = _FakeFile([bytes([0x03, 0, 0, 0x01]) + bytes(60)])
    poller = _FakePoller([[(42, select.POLLIN)]])
    source = _source(fh, poller)
    source.open(str(node))

    events = source.read_events(2.0)

    assert len(events) == 1
    assert events[0].identity is DialIdentity.RIGHT
    assert events[0].direction is RotationDirection.CLOCKWISE
    assert poller.timeouts == [2000]


def test_timeout_with_node_present_yields_nothing(tmp_path: Path) -> None:
    node = tmp_path / "hidraw0"
    node.touch()
    source = _source(_FakeFile([]), _FakePoller([[]]))
    source.open(str(node))

    assert source.read_events(0.5) == []


def test_timeout_with_node_gone_raises_disconnected(tmp_path: Path) -> None:
    source = _source(_FakeFile([]), _FakePoller([[]]))
    source.open(str(tmp_path / "hidraw-vanished"))

    with pytest.raises(SourceDisconnected):
        source.read_events(0.5)


def test_hangup_mask_raises_disconnected(tmp_path: Path) -> None:
    node = tmp_path / "hidraw0"
    node.touch()
    source = _source(_FakeFile([]), _FakePoller([[(42, select.POLLIN | select.POLLHUP)]]))
    source.open(str(node))

    with pytest.raises(SourceDisconnected):
        source.read_events(0.5)


def test_short_read_is_ignored(tmp_path: Path) -> None:
    node = tmp_path / "hidraw0"
    node.touch()
    source = _source(_FakeFile([b"\x03\x00"]), _FakePoller([[(42, select.POLLIN)]]))
    source.open(str(node))

    assert source.read_events(0.5) == []


def test_read_error_propagates_for_the_session_to_handle(tmp_path: Path) -> None:
    node = tmp_path / "hidraw0"
    node.touch()
    fh = _FakeFile([], error=OSError(19, "No such device"))
    source = _source(fh, _FakePoller([[(42, select.POLLIN)]]))
    source.open(str(node))

    with pytest.raises(OSError):
        source.read_events(0.5)


def test_close_is_idempotent(tmp_path: Path) -> None:
    fh = _FakeFile([])
    source = _source(fh, _FakePoller([]))
    source.open(str(tmp_path / "hidraw0"))

    source.close()
    source.close()

    assert fh.closed is True
    assert source.is_open is False


def test_read_without_open_raises() -> None:
    with pytest.raises(SourceDisconnected):
        HidrawDialSource().read_events(0.1)
