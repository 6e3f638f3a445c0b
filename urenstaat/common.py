import datetime
import enum
import math
import re
import typing
from dataclasses import dataclass

from dateutil.relativedelta import relativedelta

from urenstaat.errors import FormatError, InvalidDate, InvalidValue


class Weekday(enum.IntEnum):
    MON = 0
    TUE = 1
    WED = 2
    THU = 3
    FRI = 4
    SAT = 5
    SUN = 6

    @property
    def column(self) -> str:
        return self.name.lower()

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def iso(self) -> int:
        return self.value + 1

    @property
    def abbreviation(self) -> str:
        return ('Ma', 'Di', 'Wo', 'Do', 'Vr', 'Za', 'Zo')[self.value]

    @classmethod
    def of(cls, date: datetime.date) -> 'Weekday':
        return cls(date.weekday())


def validate_hours(value) -> float:
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise InvalidValue(f'not a number: {value!r}')
    if not math.isfinite(hours) or hours < 0:
        raise InvalidValue(f'hours must be a finite, non-negative number, got {value!r}')
    return hours


class DayHours:
    """Hours for one week, Monday first."""

    def __init__(self, hours: typing.Iterable[float] = (0, 0, 0, 0, 0, 0, 0)):
        values = tuple(validate_hours(value) for value in hours)
        if len(values) != len(Weekday):
            raise InvalidValue(f'expected {len(Weekday)} day values, got {len(values)}')
        self._hours = values

    def __getitem__(self, day: Weekday) -> float:
        return self._hours[day]

    def __iter__(self):
        return iter(self._hours)

    def __len__(self):
        return len(self._hours)

    def __eq__(self, other):
        if not isinstance(other, DayHours):
            return NotImplemented
        return self._hours == other._hours

    def __hash__(self):
        return hash(self._hours)

    def __repr__(self):
        return f'DayHours({self._hours!r})'

    def total(self) -> float:
        return sum(self._hours)

    def items(self) -> typing.Iterator[typing.Tuple[Weekday, float]]:
        return zip(Weekday, self._hours)

    def replace(self, day: Weekday, value: float) -> 'DayHours':
        hours = list(self._hours)
        hours[day] = value
        return DayHours(hours)

    def as_columns(self) -> typing.Dict[str, float]:
        return {day.column: value for day, value in self.items()}

    @classmethod
    def from_columns(cls, row: typing.Mapping[str, float]) -> 'DayHours':
        return cls(row[day.column] or 0 for day in Weekday)


_WEEK_PATTERN = re.compile(r'^(\d+)-W(\d{2,})$')


@dataclass(frozen=True, order=True)
class WeekKey:
    iso_year: int
    iso_week: int

    def __str__(self):
        return f'{self.iso_year}-W{self.iso_week:02d}'

    @classmethod
    def parse(cls, value: str) -> 'WeekKey':
        match = _WEEK_PATTERN.match(value.strip()) if isinstance(value, str) else None
        if not match:
            raise FormatError(f'week must look like YYYY-Www, got {value!r}')
        iso_week = int(match.group(2))
        if not 1 <= iso_week <= 53:
            raise FormatError(f'week number must be within 1..53, got {iso_week}')
        return cls(int(match.group(1)), iso_week)

    @classmethod
    def from_date(cls, date: datetime.date) -> 'WeekKey':
        iso_year, iso_week, _ = date.isocalendar()
        return cls(iso_year, iso_week)

    @classmethod
    def following(cls, today: datetime.date) -> 'WeekKey':
        return cls.from_date(today + relativedelta(weeks=1))

    def to_date(self, weekday: Weekday) -> datetime.date:
        return iso_to_date(self.iso_year, self.iso_week, weekday.iso)

    def validate(self) -> 'WeekKey':
        self.to_date(Weekday.MON)
        return self


def iso_to_date(iso_year: int, iso_week: int, iso_weekday: int) -> datetime.date:
    try:
        return datetime.date.fromisocalendar(iso_year, iso_week, iso_weekday)
    except ValueError as e:
        raise InvalidDate(f'{iso_year}-W{iso_week:02d}-{iso_weekday} does not exist: {e}') from e


class DaysRange:

    def __init__(self, start_date, end_date):
        if start_date > end_date:
            raise ValueError(f'start date ({start_date.strftime("%Y-%m-%d")}) '
                             f'is after end date ({end_date.strftime("%Y-%m-%d")})')
        self._start = start_date
        self._end = end_date

    def __iter__(self):
        delta = self._end - self._start
        for i in range(delta.days + 1):
            yield self._start + datetime.timedelta(days=i)


@dataclass(frozen=True, order=True)
class MonthKey:
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidDate(f'month must be within 1..12, got {self.month}')
        if not datetime.MINYEAR <= self.year <= datetime.MAXYEAR:
            raise InvalidDate(f'year out of range: {self.year}')

    def __str__(self):
        return f'{self.year}-{self.month:02d}'

    @property
    def first_day(self) -> datetime.date:
        return datetime.date(self.year, self.month, 1)

    @property
    def last_day(self) -> datetime.date:
        return self.first_day + relativedelta(months=1) - relativedelta(days=1)

    @property
    def days_in_month(self) -> int:
        return self.last_day.day

    def date(self, day: int) -> datetime.date:
        try:
            return datetime.date(self.year, self.month, day)
        except ValueError as e:
            raise InvalidDate(f'{self}-{day:02d} does not exist') from e

    def contains(self, date: datetime.date) -> bool:
        return date.year == self.year and date.month == self.month

    def days(self) -> DaysRange:
        return DaysRange(self.first_day, self.last_day)

    @classmethod
    def of(cls, date: datetime.date) -> 'MonthKey':
        return cls(date.year, date.month)

    @classmethod
    def previous(cls, today: datetime.date) -> 'MonthKey':
        return cls.of(today.replace(day=1) - relativedelta(months=1))


def format_hours(hours: float) -> str:
    if not hours:
        return ''
    return f'{hours:g}'
