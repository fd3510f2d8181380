from videosync.db.session import engine, Session, init_db
from videosync.db.seed import seed_all


def run_seed():
    init_db()
    with Session(engine) as session:
        seed_all(session, "videosync/db/seed_data.yaml")


if __name__ == "__main__":
    run_seed()
