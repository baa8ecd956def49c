"""Local wall-clock time from a UTC instant, a zone offset, and a simplified DST rule.

The DST rule is one US/EU-style heuristic applied worldwide, mirrored for the
southern hemisphere. It does not know per-country transition dates or the hour
of the switch; keep it that way unless a real rule database becomes a goal.
"""

import calendar
from datetime import date, datetime, timedelta

from globeclock.clock import to_instant
from globeclock.models import GeoCoordinate, LocalTimeResult
from globeclock.timezones import zone_label

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def last_sunday_of_month(year: int, month: int) -> date:
    """Latest Sunday in the month, walking back from its final day."""
    last_day = date(year, month, calendar.monthrange(year, month)[1])
    # date.weekday(): Monday=0 ... Sunday=6
    return last_day - timedelta(days=(last_day.weekday() + 1) % 7)


def is_dst(latitude: float, longitude: float, instant: datetime) -> bool:
    """Whether the daylight-saving hour applies at this place and UTC date.

    Northern hemisphere (latitude >= 0): April through October, plus March
    from its last Sunday. Southern hemisphere: October through March, plus
    April up to its last Sunday and September from its last Sunday.
    Longitude is accepted for call-site symmetry and is not consulted.
    """
    instant = to_instant(instant)
    month, day = instant.month, instant.day
    last_sunday = last_sunday_of_month(instant.year, month).day

    if latitude >= 0:
        return (
            3 < month < 11
            or (month == 3 and day >= last_sunday)
            or (month == 10 and day <= last_sunday)
        )
    return (
        month < 4
        or month > 9
        or (month == 4 and day <= last_sunday)
        or (month == 9 and day >= last_sunday)
    )


def resolve_local_time(
    now_utc: datetime,
    utc_offset_hours: float,
    coord: GeoCoordinate,
    timezone_label: str | None = None,
) -> LocalTimeResult:
    """Compute the local time, weekday, and date for a coordinate.

    Only the hour moves; minutes and seconds are the UTC ones, so a half-hour
    offset drops its fraction.

    Args:
        now_utc: Current UTC instant.
        utc_offset_hours: Zone offset from the timezone dataset.
        coord: Where the time is being read; picks the DST hemisphere.
        timezone_label: Label to report. Defaults to "GMT±N" for the offset.

    Returns:
        LocalTimeResult. The calendar date rolls forward or back when the
        shifted hour leaves [0, 24).
    """
    now_utc = to_instant(now_utc)
    shift = utc_offset_hours
    if is_dst(coord.latitude, coord.longitude, now_utc):
        shift += 1

    local_hours = now_utc.hour + shift
    local_date = now_utc.date()
    if local_hours >= 24:
        local_hours -= 24
        local_date += timedelta(days=1)
    elif local_hours < 0:
        local_hours += 24
        local_date -= timedelta(days=1)

    return LocalTimeResult(
        timezone_label=timezone_label if timezone_label is not None else zone_label(utc_offset_hours),
        local_time=f"{int(local_hours):02d}:{now_utc.minute:02d}:{now_utc.second:02d}",
        local_weekday=_WEEKDAYS[local_date.weekday()],
        local_calendar_date=f"{_MONTHS[local_date.month - 1]} {local_date.day}, {local_date.year}",
    )
