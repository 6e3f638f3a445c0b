import datetime
import logging

import click

from urenstaat.common import MonthKey
from urenstaat.context import pass_timesheet, TimesheetContext
from urenstaat.model.aggregation import HoursLookup
from urenstaat.model.excel import TimesheetWorkbookWriter
from urenstaat.model.layout import build_layout
from urenstaat.prompts import choose, command_errors, MONTH, YEAR
from .month import previous_month

logger = logging.getLogger(__name__)


@click.option('--project', '-p',
              help='Project to export, chosen from the logged projects when omitted',
              required=False,
              default=None)
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
@click.command(help='Write the monthly timesheet of one project to an xlsx file.')
@pass_timesheet
def export(timesheet: TimesheetContext, year: int, month: int, project: str):
    with command_errors():
        projects = timesheet.entries.projects()
        if not projects:
            click.echo('No projects found in logs to export.')
            return
        if project is None:
            project = choose('Select Project to Export', projects)
        elif project not in projects:
            raise click.ClickException(f'no hours logged for project {project!r}')
        hours_for_date = HoursLookup(timesheet.entries.list_project(project))

    plan = build_layout(project, MonthKey(year, month), timesheet.employee, hours_for_date,
                        datetime.date.today(), timesheet.address)
    path = timesheet.export_path(year, month, project)
    logger.info('writing %d placements to %s', len(plan), path)
    try:
        with TimesheetWorkbookWriter(path, timesheet.images) as writer:
            writer.write(plan)
    except OSError as e:
        raise click.ClickException(f'export failed: {e}') from e
    click.echo(f'File successfully generated: {path}')
