import click

from urenstaat.context import pass_timesheet, TimesheetContext
from urenstaat.loops import TemplateLoop
from urenstaat.prompts import command_errors


@click.command(help='Manage the default weekly hours per project.')
@pass_timesheet
def template(timesheet: TimesheetContext):
    with command_errors():
        TemplateLoop(timesheet.templates).run()
