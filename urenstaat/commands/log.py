import datetime

import click

from urenstaat.common import WeekKey
from urenstaat.context import pass_timesheet, TimesheetContext
from urenstaat.loops import EntryLoop
from urenstaat.prompts import command_errors, WEEK


def next_week() -> str:
    return str(WeekKey.following(datetime.date.today()))


@click.option('--week', '-w',
              help='ISO week in format YYYY-Www',
              type=WEEK,
              required=True,
              default=next_week,
              prompt='Enter Week (YYYY-Www)')
@click.command(help='Log hours per project for one week.')
@pass_timesheet
def log(timesheet: TimesheetContext, week: WeekKey):
    with command_errors():
        EntryLoop(week, timesheet.entries, timesheet.templates).run()
