from loco.cli import main, parse_args
from loco.storage.dao import DAO

CSV = (
    "kind,ts,lat,lon,accuracy,x,y,z\n"
    "location,1700000000000,45.0,7.0,5.0,,,\n"
    "location,1700000020000,45.0003,7.0,5.0,,,\n"
    "acceleration,1700000021000,,,,0.6,0.8,0.0\n"
)


def test_parse_args_defaults():
    args = parse_args(["replay", "morning", "walk.csv"])
    assert (args.command, args.name, args.file, args.preset) == ("replay", "morning", "walk.csv", "default")
    assert parse_args(["serve", "morning"]).port == 8000


def test_replay_routes_totals_export(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "walk.csv").write_text(CSV, encoding="utf-8")

    assert main(["replay", "morning", "walk.csv", "--preset", "pedestrian"]) == 0
    routes = DAO("loco_morning.sqlite").get_routes()
    assert len(routes) == 1

    assert main(["routes", "morning"]) == 0
    assert main(["totals", "morning"]) == 0
    assert main(["export", "morning", routes[0].id, "--outdir", "out"]) == 0
    assert (tmp_path / "out" / f"{routes[0].id}.geojson").exists()


def test_export_unknown_route(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["export", "empty", "route-1"]) == 1


def test_replay_bad_file_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bad.csv").write_text("kind,ts\nwarp,1\n", encoding="utf-8")
    assert main(["replay", "morning", "bad.csv"]) == 1


def test_version():
    assert main(["version"]) == 0
