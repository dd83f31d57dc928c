"""Service for key/value business settings."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.modules.app_settings.models import AppSetting, SettingKey


def default_settings(today: date | None = None) -> list[tuple[str, str, str]]:
    """(key, value, description) rows created for a fresh installation."""
    today = today or date.today()
    return [
        (SettingKey.FAMILY_FEE, "20", "Per-family fee amount"),
        (SettingKey.BACKGROUND_FEE, "0", "Background check fee amount"),
        (SettingKey.STUDENT_FEE, "20", "Per-student fee amount"),
        (SettingKey.SCHOOL_YEAR, str(today.year), "Current school year"),
    ]


async def get_settings_map(db: AsyncSession) -> dict[str, str]:
    """All settings with a value, as a flat map."""
    result = await db.execute(select(AppSetting.key, AppSetting.value))
    return {key: value for key, value in result.all() if key and value}


async def set_setting(
    db: AsyncSession, key: str, value: str, description: str | None = None
) -> AppSetting:
    """Insert or update one setting."""
    result = await db.execute(select(AppSetting).where(AppSetting.key == key))
    row = result.scalar_one_or_none()
    if row is None:
        row = AppSetting(key=key, value=value, description=description)
        db.add(row)
    else:
        row.value = value
        if description is not None:
            row.description = description
    await db.flush()
    return row


async def ensure_default_settings(db: AsyncSession, today: date | None = None) -> list[str]:
    """Create missing default settings; existing values are left alone.

    Returns the keys that were created.
    """
    existing = await db.execute(select(AppSetting.key))
    present = set(existing.scalars().all())
    created = []
    for key, value, description in default_settings(today):
        if key in present:
            continue
        db.add(AppSetting(key=key, value=value, description=description))
        created.append(key)
    await db.flush()
    return created
