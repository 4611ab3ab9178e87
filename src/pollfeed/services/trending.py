"""Periodic recomputation of engagement and trending scores.

This module provides the TrendingScoreWorker class which, on a fixed interval,
folds every post's current counters and age into its ``engagement_score`` and
``trending_score`` columns. Each post is an independent unit of work: a
failure on one post is logged and the scan moves on to the next.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pollfeed.core.errors import InvalidEngagementStateError
from pollfeed.core.settings import settings
from pollfeed.db.session import SessionLocal
from pollfeed.db.time import utcnow
from pollfeed.ranking.scoring import EngagementSnapshot, engagement_score
from pollfeed.repositories.post_repo import PostRepository

# Configure logger for this module
logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 0.1


@dataclass
class TrendingRunReport:
    """Outcome of a single recomputation cycle."""

    updated: int = 0
    failed: int = 0
    failed_post_ids: list[int] = field(default_factory=list)
    listing_failed: bool = False


class TrendingScoreWorker:
    """Recomputes derived post scores in the background.

    The worker owns an asyncio task created by :meth:`start` and stopped by
    :meth:`stop`. Tests drive a single cycle through :meth:`run_once`.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        interval_seconds: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the worker.

        Args:
            session_factory: Callable returning a new session. Defaults to SessionLocal.
            interval_seconds: Delay between cycles. Defaults to the configured interval.
            clock: Source of the current time used for score decay.
        """
        self.session_factory = session_factory or SessionLocal
        if interval_seconds is None:
            interval_seconds = settings.trending_update_interval_seconds
        self.interval_seconds = max(MIN_INTERVAL_SECONDS, float(interval_seconds))
        self.clock = clock
        self.last_report: TrendingRunReport | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background recomputation loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the loop and wait for an in-flight cycle to finish."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                self.last_report = await asyncio.to_thread(self.run_once)
            except (SQLAlchemyError, OSError) as e:
                logger.error("TrendingScoreWorker cycle failed: %s", e, exc_info=True)
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                logger.error(
                    "TrendingScoreWorker encountered data processing error: %s", e, exc_info=True
                )
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue

    def run_once(self) -> TrendingRunReport:
        """Recompute scores for every post once and report the outcome."""
        report = TrendingRunReport()
        now = self.clock()

        with self.session_factory() as db:
            repo = PostRepository(db)
            try:
                rows = repo.engagement_rows()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("TrendingScoreWorker could not list posts: %s", e, exc_info=True)
                report.listing_failed = True
                return report

            logger.debug("Recomputing trending scores for %d posts", len(rows))
            for row in rows:
                if self._update_post(db, repo, row, now):
                    report.updated += 1
                else:
                    report.failed += 1
                    report.failed_post_ids.append(row.id)

        logger.info(
            "Trending scores recomputed: %d updated, %d failed",
            report.updated,
            report.failed,
        )
        return report

    def _update_post(self, db: Session, repo: PostRepository, row, now: datetime) -> bool:
        try:
            score = engagement_score(EngagementSnapshot.from_post(row), now)
            # Trending currently mirrors engagement; kept separate to allow divergence.
            repo.update_scores(row.id, engagement_score=score, trending_score=score)
            db.commit()
        except InvalidEngagementStateError as e:
            db.rollback()
            logger.error(
                "Skipping post %s with invalid engagement state: %s", row.id, e, exc_info=True
            )
            return False
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("Storage error updating scores for post %s: %s", row.id, e)
            return False
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            db.rollback()
            logger.error(
                "Data processing error updating scores for post %s: %s", row.id, e, exc_info=True
            )
            return False
        return True
