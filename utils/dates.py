# -*- coding: utf-8 -*-
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from config import settings

EPOCH = date(1970, 1, 1)


def modle_today() -> date:
    """Today's date in the zone that defines the Modle day (MODLE_TIMEZONE)."""
    return datetime.now(ZoneInfo(settings.MODLE_TIMEZONE)).date()


def yesterday_of(day: date) -> date:
    return day - timedelta(days=1)


def days_since_epoch(day: date) -> int:
    return (day - EPOCH).days
