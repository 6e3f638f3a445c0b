import datetime

import click

from urenstaat.common import MonthKey
from urenstaat.context import pass_timesheet, TimesheetContext
from urenstaat.model.aggregation import aggregate
from urenstaat.presenter import Presenter
from urenstaat.prompts import command_errors, MONTH, YEAR


def previous_month() -> MonthKey:
    return MonthKey.previous(datetime.date.today())


@click.option('--month', '-m',
              help='Month number (1-12)',
              type=MONTH,
              required=True,
              default=lambda: previous_month().month,
              prompt='Month (1-12)')
@click.option('--year', '-y',
              help='Year in format YYYY',
              type=YEAR,
              required=True,
              default=lambda: previous_month().year,
              prompt='Year')
@click.command(help='Show hours per project per day for one month.')
@pass_timesheet
def month(timesheet: TimesheetContext, year: int, month: int):
    click.echo('\n--- Monthly Overview (Matrix View) ---')
    with command_errors():
        rows = timesheet.entries.rows()
    matrix = aggregate(rows, MonthKey(year, month))
    if matrix.skipped_rows:
        click.secho(f'{matrix.skipped_rows} row(s) skipped because of a malformed week', fg='yellow')
    if matrix.is_empty:
        click.echo(f'No data found for {month}/{year}.')
        return
    Presenter().month(matrix)
