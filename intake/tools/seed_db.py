"""Seed the database with the default ticket categories and crisis rules.

Usage:
    python -m intake.tools.seed_db
    python -m intake.tools.seed_db --drop  # drop existing routing data first
    python -m intake.tools.seed_db --verify-only
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from intake.adapters.persistence.database import async_session_factory
from intake.adapters.persistence.models import (
    AssignmentHistoryModel,
    CounselorSpecializationModel,
    CrisisRuleModel,
    TicketCategoryModel,
)
from intake.domain.value_objects.enums import MatchMode, Severity

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: list[dict] = [
    {"name": "Mental Health", "slug": "mental-health",
     "crisis_detection_enabled": True, "sla_response_hours": 2, "max_priority_level": 4},
    {"name": "Crisis Support", "slug": "crisis-support",
     "crisis_detection_enabled": True, "sla_response_hours": 1, "max_priority_level": 4},
    {"name": "Academic Support", "slug": "academic-support",
     "crisis_detection_enabled": False, "sla_response_hours": 24, "max_priority_level": 3},
    {"name": "General Inquiry", "slug": "general-inquiry",
     "crisis_detection_enabled": False, "sla_response_hours": 48, "max_priority_level": 3},
    {"name": "Technical Issues", "slug": "technical-issues",
     "crisis_detection_enabled": False, "sla_response_hours": 24, "max_priority_level": 3},
]

# (keyword, severity, match mode); all global and case-insensitive
DEFAULT_CRISIS_RULES: list[tuple[str, Severity, MatchMode]] = [
    ("suicide", Severity.CRITICAL, MatchMode.PARTIAL),
    ("kill myself", Severity.CRITICAL, MatchMode.EXACT),
    ("end my life", Severity.CRITICAL, MatchMode.EXACT),
    ("want to die", Severity.CRITICAL, MatchMode.EXACT),
    ("suicidal", Severity.CRITICAL, MatchMode.PARTIAL),
    ("self-harm", Severity.HIGH, MatchMode.PARTIAL),
    ("cutting", Severity.HIGH, MatchMode.PARTIAL),
    ("hurt myself", Severity.HIGH, MatchMode.EXACT),
    ("emergency", Severity.HIGH, MatchMode.PARTIAL),
    ("crisis", Severity.HIGH, MatchMode.PARTIAL),
    ("depressed", Severity.MEDIUM, MatchMode.PARTIAL),
    ("anxiety", Severity.MEDIUM, MatchMode.PARTIAL),
    ("panic attack", Severity.MEDIUM, MatchMode.EXACT),
    ("overwhelmed", Severity.MEDIUM, MatchMode.PARTIAL),
    ("hopeless", Severity.MEDIUM, MatchMode.PARTIAL),
    ("stressed", Severity.LOW, MatchMode.PARTIAL),
    ("worried", Severity.LOW, MatchMode.PARTIAL),
    ("struggling", Severity.LOW, MatchMode.PARTIAL),
]


async def _drop_data(session: AsyncSession) -> None:
    """Delete routing data in FK order. Counselors belong to the user
    directory and are left alone."""
    for model in [
        AssignmentHistoryModel,
        CrisisRuleModel,
        CounselorSpecializationModel,
        TicketCategoryModel,
    ]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped existing routing data")


async def seed(drop: bool = False) -> dict[str, int]:
    """Insert defaults that are not there yet. Returns counts of new rows."""
    counts = {"categories": 0, "crisis_rules": 0}

    async with async_session_factory() as session:
        if drop:
            await _drop_data(session)

        for cd in DEFAULT_CATEGORIES:
            existing = await session.execute(
                select(TicketCategoryModel).where(TicketCategoryModel.slug == cd["slug"])
            )
            if existing.scalar_one_or_none():
                logger.debug("Category '%s' already exists, skipping", cd["slug"])
                continue
            session.add(TicketCategoryModel(auto_assign=True, is_active=True, **cd))
            counts["categories"] += 1

        for keyword, severity, mode in DEFAULT_CRISIS_RULES:
            existing = await session.execute(
                select(CrisisRuleModel).where(
                    CrisisRuleModel.keyword == keyword,
                    CrisisRuleModel.category_id.is_(None),
                )
            )
            if existing.scalar_one_or_none():
                logger.debug("Crisis rule '%s' already exists, skipping", keyword)
                continue
            session.add(
                CrisisRuleModel(
                    keyword=keyword,
                    severity_level=severity.value,
                    match_mode=mode.value,
                    case_sensitive=False,
                    category_id=None,
                    is_active=True,
                    trigger_count=0,
                )
            )
            counts["crisis_rules"] += 1

        await session.commit()

    logger.info(
        "Seeded %d categories and %d crisis rules",
        counts["categories"], counts["crisis_rules"],
    )
    return counts


async def _verify_data() -> None:
    async with async_session_factory() as session:
        categories = (await session.execute(select(TicketCategoryModel))).scalars().all()
        rules_by_severity = dict(
            (
                await session.execute(
                    select(CrisisRuleModel.severity_level, func.count())
                    .where(CrisisRuleModel.is_active.is_(True))
                    .group_by(CrisisRuleModel.severity_level)
                )
            ).all()
        )
        specializations = (
            await session.execute(select(CounselorSpecializationModel))
        ).scalars().all()

    logger.info("Categories: %d", len(categories))
    for c in categories:
        logger.info(
            "  %-20s auto_assign=%s crisis_detection=%s sla=%dh",
            c.name, c.auto_assign, c.crisis_detection_enabled, c.sla_response_hours,
        )
    logger.info("Active crisis rules by severity: %s", rules_by_severity)

    over = [s.id for s in specializations if s.current_workload > s.max_workload]
    if over:
        logger.warning("Specializations over capacity: %s", over)
    else:
        logger.info("Specializations: %d, none over capacity", len(specializations))


def main():
    parser = argparse.ArgumentParser(description="Seed default routing configuration")
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing routing data before seeding",
    )
    parser.add_argument(
        "--verify-only", action="store_true",
        help="Only run verification, don't seed",
    )
    args = parser.parse_args()

    if args.verify_only:
        asyncio.run(_verify_data())
    else:
        async def run_all():
            await seed(drop=args.drop)
            await _verify_data()
        asyncio.run(run_all())


if __name__ == "__main__":
    main()
