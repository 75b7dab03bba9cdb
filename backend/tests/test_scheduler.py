from datetime import datetime, timedelta, timezone
from prm.core.scheduler import purge_expired_sessions_job
from prm.models.session import UserSession


def add_session(db, token, expires_in_minutes):
    now = datetime.now(timezone.utc)
    db.add(UserSession(
        token=token,
        user_id=1,
        user_email="ann@x.com",
        user_display_name="Ann Lee",
        created_at=now,
        expires_at=now + timedelta(minutes=expires_in_minutes),
    ))
    db.commit()


def test_purge_job_removes_only_expired_sessions(db):
    add_session(db, "stale", -5)
    add_session(db, "live", 5)

    purge_expired_sessions_job()

    db.expire_all()
    assert [s.token for s in db.query(UserSession).all()] == ["live"]


def test_purge_job_with_nothing_to_do(db):
    purge_expired_sessions_job()
    assert db.query(UserSession).count() == 0
