import logging

from aqdash.charts.series import LIVE_WINDOW, Mode, SeriesAssembler
from aqdash.shared.models import Sample


def _sample(second: int, temp: float = 20.0) -> Sample:
    minutes, seconds = divmod(second, 60)
    return Sample(timestamp=f"2024-01-01T10:{minutes:02d}:{seconds:02d}Z", temperature=temp)


def test_live_window_keeps_most_recent_in_arrival_order() -> None:
    assembler = SeriesAssembler(Mode.LIVE)
    samples = [_sample(i, temp=float(i)) for i in range(150)]
    for s in samples:
        assert assembler.append_live(s)

    primary = assembler.snapshot().primary
    assert len(primary) == LIVE_WINDOW
    assert list(primary) == samples[-LIVE_WINDOW:]


def test_live_window_below_cap_keeps_everything() -> None:
    assembler = SeriesAssembler(Mode.LIVE)
    for i in range(3):
        assembler.append_live(_sample(i))
    assert len(assembler.snapshot().primary) == 3


def test_snapshot_is_not_affected_by_later_appends() -> None:
    assembler = SeriesAssembler(Mode.LIVE)
    assembler.append_live(_sample(0))
    before = assembler.snapshot()
    assembler.append_live(_sample(1))
    assert len(before.primary) == 1
    assert len(assembler.snapshot().primary) == 2


def test_live_appends_ignored_outside_live_mode() -> None:
    assembler = SeriesAssembler(Mode.LIVE)
    assembler.append_live(_sample(0))
    assembler.enter(Mode.HISTORICAL)

    assert not assembler.append_live(_sample(1))
    assert assembler.snapshot().primary == ()


def test_entering_live_resets_everything() -> None:
    assembler = SeriesAssembler(Mode.COMPARE)
    assembler.set_comparison_pair([_sample(0)], [_sample(1)])
    assembler.enter(Mode.LIVE)

    snapshot = assembler.snapshot()
    assert snapshot.mode is Mode.LIVE
    assert snapshot.primary == ()
    assert snapshot.secondary is None


def test_leaving_compare_discards_secondary() -> None:
    assembler = SeriesAssembler(Mode.COMPARE)
    assembler.set_comparison_pair([_sample(0)], [_sample(1)])
    assembler.enter(Mode.HISTORICAL)
    assembler.enter(Mode.COMPARE)

    snapshot = assembler.snapshot()
    assert snapshot.secondary == ()
    assert snapshot.primary == (_sample(0),)


def test_set_range_sorts_chronologically_with_stable_ties() -> None:
    assembler = SeriesAssembler(Mode.HISTORICAL)
    a = _sample(30, temp=1.0)
    b = _sample(0, temp=2.0)
    c = _sample(30, temp=3.0)
    assembler.set_range([a, b, c])

    assert assembler.snapshot().primary == (b, a, c)
    assert assembler.latest() == c


def test_set_range_replaces_whole_series() -> None:
    assembler = SeriesAssembler(Mode.HISTORICAL)
    assembler.set_range([_sample(0), _sample(15)])
    assembler.set_range([_sample(45)])
    assert assembler.snapshot().primary == (_sample(45),)


def test_latest_is_none_when_empty() -> None:
    assert SeriesAssembler(Mode.HISTORICAL).latest() is None


def test_entering_the_current_mode_logs_no_transition(caplog) -> None:
    assembler = SeriesAssembler(Mode.LIVE)
    with caplog.at_level(logging.DEBUG, logger="aqdash.charts.series"):
        assembler.enter(Mode.LIVE)
        assert "->" not in caplog.text
        assembler.enter(Mode.HISTORICAL)
    assert "live -> historical" in caplog.text
