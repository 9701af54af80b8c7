# Date/time helpers for Sage ENDEC log timestamps.
# All values are naive local wall-clock datetimes; nothing here converts zones.
from __future__ import annotations
import calendar
import re
from datetime import datetime, timedelta

WEEK = timedelta(days=7)
# composed ISO text must be strict: 4-digit year, 2-digit fields, seconds optional
_ISO_RE = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2})?$')

def parse_device_timestamp(text) -> datetime | None:
    """Parse 'M/D/YY HH:MM:SS' or 'M/D/YYYY HH:MM:SS' (time optional). None on failure."""
    if not text or not isinstance(text, str):
        return None
    parts = text.split(" ")
    date_part = parts[0]
    time_part = parts[1] if len(parts) > 1 and parts[1] else "00:00:00"
    if not date_part:
        return None
    segs = date_part.split("/")
    if len(segs) != 3:
        return None
    month, day, year = segs
    if len(year) == 2:
        year = "20" + year
    iso = f"{year}-{month.zfill(2)}-{day.zfill(2)}T{time_part}"
    m = _ISO_RE.match(iso)
    if not m:
        return None
    fmt = "%Y-%m-%dT%H:%M:%S" if m.group(1) else "%Y-%m-%dT%H:%M"
    try:
        return datetime.strptime(iso, fmt)
    except ValueError:
        return None

def week_start(ts: datetime) -> datetime:
    """Most recent Sunday 00:00:00 on or before ts."""
    back = (ts.weekday() + 1) % 7  # Mon=0 .. Sun=6 -> days since Sunday
    d = ts - timedelta(days=back)
    return d.replace(hour=0, minute=0, second=0, microsecond=0)

def week_end(start: datetime) -> datetime:
    """Exclusive end of the week bucket that begins at start."""
    return start + WEEK

def format_short_date(ts: datetime) -> str:
    return f"{ts.month:02d}/{ts.day:02d}/{ts.year:04d}"

def format_time(ts: datetime) -> str:
    return f"{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"

def format_week_range(sunday: datetime) -> str:
    end = sunday + timedelta(days=6)
    return f"{sunday.month:02d}/{sunday.day:02d} - {end.month:02d}/{end.day:02d}"

def month_key(ts: datetime) -> str:
    return f"{ts.year:04d}/{ts.month:02d}"

def month_label(year: int, month: int) -> str:
    """English month name, e.g. 'March'."""
    if not (1 <= month <= 12):
        raise ValueError("month must be 1..12")
    return calendar.month_name[month]

