from pathlib import Path
from typing import Any, Dict, List

import yaml
from sqlmodel import Session, select

from videosync.db.models.profiles import Profile
from videosync.db.models.videos import TERMINAL_STATUSES, ProcessingStatus, Video


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: str | Path) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Seed Profiles (destinataires des notifications)
# -----------------------------
def seed_profiles(session: Session, data: Dict[str, Any]) -> int:
    profiles: List[Dict[str, Any]] = data.get("profiles", [])
    if not profiles:
        print("⚠️ Aucun profil dans le YAML (clé 'profiles').")
        return 0

    existing = {p.email for p in session.exec(select(Profile)).all()}
    objs = [
        Profile(email=p["email"], admin_role=p.get("admin_role"))
        for p in profiles
        if p["email"] not in existing
    ]
    session.add_all(objs)
    session.commit()
    print(f"✅ {len(objs)} profils insérés ({len(profiles) - len(objs)} déjà présents).")
    return len(objs)


# -----------------------------
# Seed Videos
# -----------------------------
def seed_videos(session: Session, data: Dict[str, Any]) -> int:
    if session.exec(select(Video)).first():
        print("ℹ️ Les vidéos existent déjà, aucune insertion effectuée.")
        return 0

    videos: List[Dict[str, Any]] = data.get("videos", [])
    if not videos:
        print("⚠️ Aucune vidéo dans le YAML (clé 'videos').")
        return 0

    objs: List[Video] = []
    for v in videos:
        status = ProcessingStatus(v.get("processing_status", ProcessingStatus.QUEUED.value))
        if status.value in TERMINAL_STATUSES:
            raise ValueError(f"Vidéo '{v.get('title')}' : le seed ne crée que des vidéos non terminales.")
        objs.append(Video(
            title=v["title"],
            remote_asset_id=v.get("remote_asset_id"),
            processing_status=status.value,
        ))

    session.add_all(objs)
    session.commit()
    print(f"✅ {len(objs)} vidéos insérées.")
    return len(objs)


def seed_all(session: Session, seed_path: str | Path) -> None:
    data = load_seed_yaml(seed_path)
    seed_profiles(session, data)
    seed_videos(session, data)
