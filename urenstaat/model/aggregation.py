import datetime
import logging
import math
import typing

from urenstaat.common import DayHours, MonthKey, Weekday, WeekKey
from urenstaat.errors import FormatError, InvalidDate
from urenstaat.model.timesheet import Entry, WeekRow

logger = logging.getLogger(__name__)


class MonthMatrix:
    """Hours per project per day of one calendar month.

    Days without hours are absent rather than stored as zero. Projects iterate
    in name order.
    """

    def __init__(self, month: MonthKey, projects: typing.Mapping[str, typing.Mapping[int, float]],
                 skipped_rows: int = 0):
        self._month = month
        self._projects = {name: dict(sorted(days.items())) for name, days in sorted(projects.items())}
        column_totals = {}
        for days in self._projects.values():
            for day, hours in days.items():
                column_totals.setdefault(day, []).append(hours)
        self._column_totals = {day: math.fsum(values) for day, values in sorted(column_totals.items())}
        self._grand_total = math.fsum(hours for days in self._projects.values() for hours in days.values())
        self._skipped_rows = skipped_rows

    def __eq__(self, other):
        if not isinstance(other, MonthMatrix):
            return NotImplemented
        return (self._month, self._projects, self._skipped_rows) == (other._month, other._projects,
                                                                     other._skipped_rows)

    def __repr__(self):
        return f'MonthMatrix({self._month}, projects={self._projects!r})'

    @property
    def month(self) -> MonthKey:
        return self._month

    @property
    def projects(self) -> typing.Dict[str, typing.Dict[int, float]]:
        return self._projects

    @property
    def column_totals(self) -> typing.Dict[int, float]:
        return self._column_totals

    @property
    def grand_total(self) -> float:
        return self._grand_total

    @property
    def skipped_rows(self) -> int:
        return self._skipped_rows

    @property
    def is_empty(self) -> bool:
        return not self._projects

    def hours(self, project: str, day: int) -> float:
        return self._projects.get(project, {}).get(day, 0.0)

    def project_total(self, project: str) -> float:
        return math.fsum(self._projects.get(project, {}).values())


class MonthAggregator:
    """Buckets weekly rows into the days of one month.

    Contributions are collected per cell and summed with ``math.fsum`` so the
    result does not depend on the order rows are appended in.
    """

    def __init__(self, month: MonthKey):
        self._month = month
        self._cells = {}
        self._skipped_rows = 0

    def append(self, week: str, project: str, hours: DayHours):
        try:
            week_key = WeekKey.parse(week)
        except FormatError:
            logger.warning('skipping %s row with malformed week %r', project, week)
            self._skipped_rows += 1
            return
        for weekday, value in hours.items():
            if not value:
                continue
            try:
                date = week_key.to_date(weekday)
            except InvalidDate:
                logger.debug('%s has no %s, skipping %s hours of %s', week_key, weekday.label, value, project)
                continue
            if self._month.contains(date):
                self._cells.setdefault(project, {}).setdefault(date.day, []).append(value)

    def extend(self, rows: typing.Iterable[WeekRow]):
        for week, project, hours in rows:
            self.append(week, project, hours)
        return self

    def flush(self) -> MonthMatrix:
        projects = {
            project: {day: math.fsum(values) for day, values in days.items()}
            for project, days in self._cells.items()
        }
        return MonthMatrix(self._month, projects, self._skipped_rows)


def aggregate(rows: typing.Iterable[WeekRow], month: MonthKey) -> MonthMatrix:
    return MonthAggregator(month).extend(rows).flush()


class HoursLookup:
    """Hours of one project on a calendar date, from its weekly entries.

    Entries spelling the same ISO week differently (``2024-W05``, ``2024-W005``)
    add up, the same way ``aggregate`` counts them.
    """

    def __init__(self, entries: typing.Iterable[Entry]):
        self._weeks = {}
        for entry in entries:
            try:
                week_key = entry.week_key
            except FormatError:
                logger.warning('ignoring %s entry with malformed week %r', entry.project, entry.week)
                continue
            self._weeks.setdefault(week_key, []).append(entry.hours)

    def __call__(self, date: datetime.date) -> typing.Optional[float]:
        weeks = self._weeks.get(WeekKey.from_date(date))
        if weeks is None:
            return None
        return math.fsum(hours[Weekday.of(date)] for hours in weeks)
