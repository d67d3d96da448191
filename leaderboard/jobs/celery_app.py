"""Celery configuration for scheduled jobs."""

from __future__ import annotations

import os

from celery import Celery
from celery.schedules import crontab

broker_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")
backend_url = os.environ.get("REDIS_URL", "redis://redis:6379/0")

celery_app = Celery("leaderboard", broker=broker_url, backend=backend_url, include=["leaderboard.jobs.prepare", "leaderboard.jobs.pre_build"])
celery_app.conf.timezone = "UTC"
celery_app.conf.beat_schedule = {
    "pre-build": {
        "task": "leaderboard.jobs.pre_build.run_pre_build",
        "schedule": crontab(hour=int(os.environ.get("PRE_BUILD_HOUR", "2")), minute=int(os.environ.get("PRE_BUILD_MINUTE", "0"))),
    },
}


@celery_app.task(name="leaderboard.jobs.prepare.run_prepare")
def run_prepare_task():  # pragma: no cover - executed by worker
    from leaderboard.jobs.prepare import run_prepare

    run_prepare()


@celery_app.task(name="leaderboard.jobs.pre_build.run_pre_build")
def run_pre_build_task():  # pragma: no cover - executed by worker
    from leaderboard.jobs.pre_build import run_pre_build

    run_pre_build()
