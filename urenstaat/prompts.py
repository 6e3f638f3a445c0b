import contextlib
import datetime
import typing

import click

from urenstaat.common import DayHours, Weekday, WeekKey, validate_hours
from urenstaat.errors import StorageError, TimesheetError


class HoursType(click.ParamType):
    name = 'hours'

    def convert(self, value, param, ctx):
        try:
            return validate_hours(value)
        except TimesheetError as e:
            self.fail(str(e), param, ctx)


class WeekType(click.ParamType):
    name = 'week'

    def convert(self, value, param, ctx):
        if isinstance(value, WeekKey):
            return value
        try:
            return WeekKey.parse(value).validate()
        except TimesheetError as e:
            self.fail(str(e), param, ctx)


HOURS = HoursType()
WEEK = WeekType()
YEAR = click.IntRange(datetime.MINYEAR, datetime.MAXYEAR)
MONTH = click.IntRange(1, 12)


def prompt_hours(label: str, default: float = 0.0) -> float:
    return click.prompt(label, default=default, type=HOURS)


def prompt_week_hours(hours: DayHours = None) -> DayHours:
    hours = DayHours() if hours is None else hours
    click.echo('Enter hours for each day (press Enter to keep the current value):')
    return DayHours(prompt_hours(day.label, hours[day]) for day in Weekday)


def choose(label: str, options: typing.Sequence[str], default: str = None) -> str:
    return click.prompt(label, type=click.Choice(list(options)), default=default)


def choose_day(label: str = 'Select Day') -> Weekday:
    value = click.prompt(label, type=click.Choice([day.label for day in Weekday], case_sensitive=False))
    return Weekday[value.upper()]


@contextlib.contextmanager
def command_errors():
    try:
        yield
    except StorageError as e:
        raise click.ClickException(f'storage failure: {e}') from e
    except TimesheetError as e:
        raise click.ClickException(str(e)) from e
