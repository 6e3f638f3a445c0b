import sys
import typing

from rich import box
from rich.console import Console
from rich.table import Table

from urenstaat.common import DayHours, Weekday, format_hours
from urenstaat.model.aggregation import MonthMatrix

PIPE_WIDTH = 240


class Presenter:
    """Terminal tables for templates, week entries and month matrices."""

    def __init__(self, console: Console = None):
        self._console = console

    @property
    def console(self) -> Console:
        if self._console is not None:
            return self._console
        return Console(width=None if sys.stdout.isatty() else PIPE_WIDTH)

    def week(self, title: str, rows: typing.Iterable[typing.Tuple[str, DayHours]]):
        table = Table(title=title, box=box.SIMPLE_HEAD, title_justify='left')
        table.add_column('Project', no_wrap=True)
        for day in Weekday:
            table.add_column(day.label, justify='center')
        table.add_column('TOTAL', justify='right', style='bold')

        day_totals = [0.0] * len(Weekday)
        for project, hours in rows:
            for day, value in hours.items():
                day_totals[day] += value
            table.add_row(project, *[format_hours(value) for value in hours], format_hours(hours.total()))
        table.add_row('TOTAL', *[format_hours(value) for value in day_totals],
                      f'[underline]{format_hours(sum(day_totals))}[/underline]', style='bold')
        self.console.print(table)

    def month(self, matrix: MonthMatrix):
        month = matrix.month
        table = Table(title=f'Report: {month.month}/{month.year}', box=box.SIMPLE_HEAD, title_justify='left')
        table.add_column('Project', no_wrap=True, style='bold')
        for date in month.days():
            table.add_column(f'{Weekday.of(date).label}\n{date.day:02d}', justify='center', header_style='bold')
        table.add_column('TOT', justify='right', style='bold')

        for project in matrix.projects:
            table.add_row(project, *[format_hours(matrix.hours(project, date.day)) for date in month.days()],
                          format_hours(matrix.project_total(project)))
        table.add_row('TOTAL', *[format_hours(matrix.column_totals.get(date.day, 0)) for date in month.days()],
                      f'[underline]{format_hours(matrix.grand_total)}[/underline]', style='bold')
        self.console.print(table)
