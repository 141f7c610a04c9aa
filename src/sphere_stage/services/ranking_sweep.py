"""Periodic refresh of time-decayed post scores.

Hot and trending scores decay with time, which passes even when nobody
votes. The sweep recomputes the derived scores of every visible post as of
a single instant.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sphere_stage.core.settings import settings
from sphere_stage.db.session import SessionLocal
from sphere_stage.db.time import utcnow
from sphere_stage.models import Post
from sphere_stage.services.score_aggregator import refresh_post_ranking

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


def sweep_post_scores(
    db: Session,
    now: datetime,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Refresh ``recommended_score`` and ``trending_score`` of every visible post.

    Scores are computed as of ``now``; ``scoring_timestamp`` (the post's last
    vote activity) is read, never written. Rows are visited in id order,
    ``batch_size`` at a time, and the whole sweep commits once. Running it
    again with the same ``now`` writes the same values.

    Returns:
        Number of posts whose scores were recomputed.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be positive")

    refreshed = 0
    last_id = 0
    try:
        while True:
            posts = db.scalars(
                select(Post)
                .where(
                    Post.id > last_id,
                    Post.delete_timestamp.is_(None),
                    Post.moderator_id.is_(None),
                )
                .order_by(Post.id)
                .limit(batch_size)
            ).all()
            if not posts:
                break

            for post in posts:
                refresh_post_ranking(post, now)
            db.flush()

            refreshed += len(posts)
            last_id = posts[-1].id
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    return refreshed


class RankingSweepWorker:
    """Runs :func:`sweep_post_scores` in the background at a fixed interval."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] = SessionLocal,
        interval_seconds: float | None = None,
        clock: Callable[[], datetime] = utcnow,
        batch_size: int | None = None,
        enabled: bool | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._interval = (
            settings.ranking_sweep_interval_seconds
            if interval_seconds is None
            else interval_seconds
        )
        self._clock = clock
        self._batch_size = batch_size or settings.ranking_sweep_batch_size
        self.enabled = settings.ranking_sweep_enabled if enabled is None else enabled
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if not self.enabled:
            logger.info("Ranking sweep disabled")
            return

        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop and wait for it to finish."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def run_once(self) -> int:
        """Run a single sweep in a worker thread and return the refreshed count."""
        return await asyncio.to_thread(self._sweep)

    def _sweep(self) -> int:
        now = self._clock()
        with self._session_factory() as db:
            return sweep_post_scores(db, now, self._batch_size)

    async def _run(self) -> None:
        interval = max(0.1, float(self._interval))

        while not self._stopping.is_set():
            try:
                refreshed = await self.run_once()
            except SQLAlchemyError as e:
                logger.error("Ranking sweep failed: %s", e, exc_info=True)
            except OSError as e:
                logger.warning("Ranking sweep could not reach the database: %s", e)
            except (ValueError, TypeError, KeyError, AttributeError, ArithmeticError) as e:
                logger.error("Ranking sweep hit bad post data: %s", e, exc_info=True)
            else:
                logger.info("Ranking sweep refreshed %s posts", refreshed)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                continue
