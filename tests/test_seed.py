from pathlib import Path

import pytest
from sqlmodel import select

from videosync.db.models.profiles import Profile
from videosync.db.models.videos import Video
from videosync.db.seed import load_seed_yaml, seed_all, seed_videos

SEED_FILE = Path(__file__).resolve().parents[1] / "videosync" / "db" / "seed_data.yaml"


def test_seed_is_idempotent(session):
    seed_all(session, SEED_FILE)
    seed_all(session, SEED_FILE)

    assert len(session.exec(select(Profile)).all()) == 4
    videos = session.exec(select(Video)).all()
    assert len(videos) == 3
    assert all(v.processing_status in ("queued", "uploading", "processing") for v in videos)


def test_terminal_videos_are_refused(session):
    data = {"videos": [{"title": "Done", "processing_status": "ready"}]}
    with pytest.raises(ValueError):
        seed_videos(session, data)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_seed_yaml(tmp_path / "absent.yaml")
