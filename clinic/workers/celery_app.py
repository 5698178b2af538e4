from __future__ import annotations

from functools import lru_cache

from celery import Celery
from sqlalchemy.orm import Session, sessionmaker

from clinic.core.config import Settings
from clinic.db.session import build_engine, build_session_factory


def create_celery(settings: Settings) -> Celery:
    app = Celery(
        "healthplus_clinic",
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["clinic.workers.tasks.security"],
    )
    app.conf.beat_schedule = {
        "cleanup_expired_otps": {"task": "clinic.workers.tasks.security.cleanup_expired_otps", "schedule": 3600.0},
    }
    app.conf.timezone = "UTC"
    return app


# The worker's composition root: `celery -A clinic.workers.celery_app worker`.
worker_settings = Settings()
celery_app = create_celery(worker_settings)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    """Engine for task code, built on first use inside the worker."""
    return build_session_factory(build_engine(worker_settings.DATABASE_URL))
