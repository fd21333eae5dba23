from pathlib import Path

from floatengine.runtime.run_loop import run


def test_demo_drags_then_trashes(tmp_path, monkeypatch):
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    snaps = tmp_path / "snaps"

    result = run(duration_ms=6000, snapshot_dir=str(snaps), snapshot_every_ms=1000)

    assert result.listener.finished
    assert result.renderer.count("remove_floater") == 1
    assert result.renderer.count("set_position") > 10
    assert len(result.snapshots) >= 3
    assert all(p.exists() for p in result.snapshots)


def test_demo_without_snapshots(tmp_path, monkeypatch):
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    result = run(duration_ms=1200)
    assert result.snapshots == []
    assert not result.listener.finished
