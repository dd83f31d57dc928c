#!/usr/bin/env python3
"""
Create the database tables and seed lookup data for a fresh installation.

Seeds default fee settings, the six teaching hours and grade names. Existing
rows are left untouched, so the script can be re-run safely.

Usage:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import select

from src.core.database.session import async_session, create_tables
from src.modules.app_settings.service import ensure_default_settings
from src.modules.courses.models import Grade, Hour

DEFAULT_HOURS = [
    (0, "Math"),
    (1, "1st"),
    (2, "2nd"),
    (3, "3rd"),
    (4, "4th"),
    (5, "5th"),
]

# Grade code 0 is kindergarten; 1..12 are the numbered grades
DEFAULT_GRADES = [(0, "K")] + [
    (code, f"{code}{'st' if code == 1 else 'nd' if code == 2 else 'rd' if code == 3 else 'th'}")
    for code in range(1, 13)
]


async def main() -> None:
    await create_tables()

    async with async_session() as session:
        created = await ensure_default_settings(session)

        existing_hours = set((await session.execute(select(Hour.id))).scalars().all())
        for hour_id, description in DEFAULT_HOURS:
            if hour_id not in existing_hours:
                session.add(Hour(id=hour_id, description=description))

        existing_grades = set((await session.execute(select(Grade.code))).scalars().all())
        for code, name in DEFAULT_GRADES:
            if code not in existing_grades:
                session.add(Grade(code=code, grade_name=name))

        await session.commit()

    print(f"Tables ready. Settings created: {', '.join(created) or 'none'}")


if __name__ == "__main__":
    asyncio.run(main())
