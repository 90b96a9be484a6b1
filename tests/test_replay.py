import pytest

from loco.analysis.config import ClassifierConfig
from loco.analysis.types import ActivityLabel as L
from loco.errors import ReplayFormatError
from loco.parsers.samples import iter_samples, load_samples
from loco.replay import ReplayClock, replay
from loco.storage.dao import DAO
from loco.utils.validate import AccelerationSample, LocationSample

HEADER = "kind,ts,lat,lon,accuracy,x,y,z\n"

WALK = HEADER + "".join(
    [
        "location,1700000000000,45.0,7.0,5.0,,,\n",
        "acceleration,1700000001000,,,,0.6,0.8,0.0\n",
        "location,1700000020000,45.0003,7.0,4.0,,,\n",
        "acceleration,1700000021000,,,,0.6,0.8,0.0\n",
        "acceleration,1700000022000,,,,0.6,0.8,0.0\n",
        "location,1700000040000,45.0006,7.0,,,,\n",
        "acceleration,1700000041000,,,,0.6,0.8,0.0\n",
    ]
)


@pytest.fixture
def walk_csv(tmp_path):
    p = tmp_path / "walk.csv"
    p.write_text(WALK, encoding="utf-8")
    return p


def test_iter_samples_parses_both_kinds(walk_csv):
    samples = list(iter_samples(walk_csv))
    assert len(samples) == 7
    assert isinstance(samples[0], LocationSample)
    assert samples[0].accuracy == 5.0
    assert samples[5].accuracy is None
    assert isinstance(samples[1], AccelerationSample)
    assert (samples[1].x, samples[1].y) == (0.6, 0.8)


def test_load_samples_sorts_by_timestamp(tmp_path):
    p = tmp_path / "unordered.csv"
    p.write_text(
        HEADER
        + "acceleration,30,,,,0,0,1\n"
        + "location,10,45.0,7.0,,,,\n"
        + "acceleration,20,,,,0,0,1\n",
        encoding="utf-8",
    )
    assert [s.ts for s in load_samples(p)] == [10, 20, 30]


@pytest.mark.parametrize(
    "row,line",
    [
        ("teleport,1,,,,,,\n", 2),
        ("location,abc,45.0,7.0,,,,\n", 2),
        ("location,1,95.0,7.0,,,,\n", 2),
        ("acceleration,1,,,,x,0,0\n", 2),
    ],
)
def test_bad_rows_raise_with_line_number(tmp_path, row, line):
    p = tmp_path / "bad.csv"
    p.write_text(HEADER + row, encoding="utf-8")
    with pytest.raises(ReplayFormatError) as exc:
        list(iter_samples(p))
    assert exc.value.line == line


def test_missing_columns(tmp_path):
    p = tmp_path / "bad.csv"
    p.write_text("lat,lon\n1,2\n", encoding="utf-8")
    with pytest.raises(ReplayFormatError):
        list(iter_samples(p))


def test_replay_clock_never_goes_back():
    c = ReplayClock(100)
    c.advance_to(50)
    assert c() == 100
    c.advance_to(150)
    assert c() == 150


def test_replay_walk_session(walk_csv, tmp_path):
    dao = DAO(str(tmp_path / "loco.sqlite"))
    result = replay(load_samples(walk_csv), dao=dao)

    assert result.saved
    stats = result.stats
    assert stats.start_time == 1700000000000
    assert stats.end_time == 1700000041000
    assert stats.duration == pytest.approx(41.0)
    assert stats.total_distance == pytest.approx(66.7, abs=0.2)
    labels = [e.activity for e in result.session.log]
    # first tick has only one fix, so no speed yet
    assert labels == [L.UNKNOWN, L.WALKING, L.WALKING, L.WALKING]
    assert stats.steps == 3
    assert len(result.route.points) == 4
    assert dao.get_totals().sessions == 1


def test_replay_with_preset_changes_labels(walk_csv):
    cfg = ClassifierConfig(walking_speed=2.0, running_speed=3.0, vehicle_speed=6.5)
    result = replay(load_samples(walk_csv), cfg=cfg)
    assert {e.activity for e in result.session.log} == {L.UNKNOWN, L.IDLE}
    assert result.stats.steps == 0


def test_replay_of_nothing():
    result = replay([])
    assert result.route is None
    assert result.stats.total_distance == 0
