from __future__ import annotations

import argparse
import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import select

from survey_gems.core.config import get_settings
from survey_gems.core.logging import configure_logging
from survey_gems.db.models.surveys import Survey
from survey_gems.db.repo.surveys_repo import SurveysRepo
from survey_gems.db.session import SessionLocal

REQUIRED_FIELDS = ("title", "description", "duration", "reward", "questions")


def _load_surveys(path: Path) -> list[dict[str, object]]:
    with path.open("r", encoding="utf-8") as file:
        payload = json.load(file)
    if not isinstance(payload, list):
        raise ValueError("seed file must contain a JSON array of surveys")

    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ValueError(f"survey #{index} is not an object")
        missing = [field for field in REQUIRED_FIELDS if field not in item]
        if missing:
            raise ValueError(f"survey #{index} is missing fields: {', '.join(missing)}")
        if int(item["reward"]) <= 0 or int(item["duration"]) <= 0:
            raise ValueError(f"survey #{index} must have positive reward and duration")
    return payload


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load surveys from a JSON file")
    parser.add_argument("path", type=Path, help="JSON array of survey objects")
    parser.add_argument("--inactive", action="store_true", help="Create surveys with is_active=false")
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    surveys = _load_surveys(args.path)
    now_utc = datetime.now(timezone.utc)
    created = 0
    skipped = 0

    async with SessionLocal() as session:
        existing_titles = set((await session.execute(select(Survey.title))).scalars().all())
        for item in surveys:
            title = str(item["title"]).strip()
            if title in existing_titles:
                skipped += 1
                continue
            await SurveysRepo.create(
                session,
                survey=Survey(
                    title=title,
                    description=str(item["description"]),
                    duration=int(item["duration"]),
                    reward=int(item["reward"]),
                    questions=item["questions"],
                    is_active=not args.inactive,
                    participant_count=0,
                    created_at=now_utc,
                ),
            )
            existing_titles.add(title)
            created += 1
        if args.dry_run:
            await session.rollback()
        else:
            await session.commit()

    print(f"seed_surveys created={created} skipped={skipped} dry_run={args.dry_run}")  # noqa: T201
    return 0


def main() -> int:
    configure_logging(get_settings().log_level)
    return asyncio.run(_run(_parse_args()))


if __name__ == "__main__":
    raise SystemExit(main())
