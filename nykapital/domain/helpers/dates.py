from datetime import date, datetime, time
from typing import List, Optional, Tuple, Union

from nykapital.domain.errors import ValidationError

DateLike = Union[datetime, date, str, None]

# Short Danish month labels used by the monthly chart series
DANISH_MONTHS = [
    "jan", "feb", "mar", "apr", "maj", "jun",
    "jul", "aug", "sep", "okt", "nov", "dec",
]


def now() -> datetime:
    # Single clock for the domain layer; tests monkeypatch this.
    return datetime.now()


def _parse(value: DateLike, name: str) -> Tuple[Optional[datetime], bool]:
    """
    Returns (datetime, had_time_component).
    """
    if value is None or value == "":
        return None, False
    if isinstance(value, datetime):
        parsed, has_time = value, True
    elif isinstance(value, date):
        parsed, has_time = datetime.combine(value, time.min), False
    else:
        text = str(value).strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(f"Invalid {name}: {value!r}")
        has_time = len(text) > 10
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed, has_time


def parse_start(value: DateLike) -> Optional[datetime]:
    parsed, _ = _parse(value, "start date")
    return parsed


def parse_end(value: DateLike) -> Optional[datetime]:
    """
    Inclusive upper bound. A bare date means the end of that day.
    """
    parsed, has_time = _parse(value, "end date")
    if parsed is not None and not has_time:
        return end_of_day(parsed)
    return parsed


def parse_date_range(start: DateLike, end: DateLike) -> Tuple[Optional[datetime], Optional[datetime]]:
    start_dt = parse_start(start)
    end_dt = parse_end(end)
    if start_dt and end_dt and start_dt > end_dt:
        raise ValidationError("Start date must not be after end date")
    return start_dt, end_dt


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


def in_range(moment: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start and moment < start:
        return False
    if end and moment > end:
        return False
    return True


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    [first instant of the month, first instant of the next month)
    """
    next_year, next_month = shift_month(year, month, 1)
    return datetime(year, month, 1), datetime(next_year, next_month, 1)


def trailing_months(reference: datetime, count: int = 6) -> List[Tuple[int, int]]:
    """
    The last `count` calendar months ending with the reference month, oldest first.
    """
    return [
        shift_month(reference.year, reference.month, -offset)
        for offset in range(count - 1, -1, -1)
    ]


def validate_quarter(quarter: int) -> int:
    if quarter not in (1, 2, 3, 4):
        raise ValidationError("Quarter must be between 1 and 4")
    return quarter


def validate_month(month: int) -> int:
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    return month


def validate_year(year: int) -> int:
    if not 1 <= year <= 9999:
        raise ValidationError("Year is out of range")
    return year


def quarter_months(quarter: int) -> Tuple[int, int]:
    """
    First and last calendar month (1-based, inclusive) of a quarter.
    """
    start_month = (quarter - 1) * 3 + 1
    return start_month, start_month + 2


def quarter_of(moment: datetime) -> int:
    return (moment.month - 1) // 3 + 1


def in_quarter(moment: datetime, year: int, quarter: int) -> bool:
    return moment.year == year and quarter_of(moment) == quarter
