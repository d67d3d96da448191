"""Persist a batch of fetched activities."""

from __future__ import annotations

import logging
from typing import Iterable

from dotenv import load_dotenv

from leaderboard.db.session import create_engine_from_env
from leaderboard.db.store import RecordStore
from leaderboard.ingest import bot_usernames
from leaderboard.ingest.models import Activity

logger = logging.getLogger(__name__)


def run_sync(activities: Iterable[Activity]) -> None:
    load_dotenv()
    store = RecordStore(create_engine_from_env())
    activities = list(activities)

    # Contributors first so every activity has its foreign key.
    store.add_contributors(a.contributor for a in activities)
    store.add_activities(activities)
    store.update_bot_roles(bot_usernames(activities))
    logger.info("Synced %s activities", len(activities))
