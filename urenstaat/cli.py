import logging
import os

import click
from dotenv import find_dotenv, load_dotenv
from yaml import load
try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader

from urenstaat.commands import export, log, month, template
from urenstaat.context import TimesheetContext

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


@click.group(context_settings={'auto_envvar_prefix': 'URENSTAAT'},
             help='Track your daily hours per project per week.')
@click.option('--config', default='config.yaml', type=click.Path())
@click.option('--log-level', default='WARNING', type=click.Choice(LOG_LEVELS, case_sensitive=False))
@click.pass_context
def entry_point(ctx, config, log_level):
    load_dotenv(find_dotenv(usecwd=True))
    logging.basicConfig(level=log_level.upper(), format='%(levelname)s %(name)s: %(message)s')
    settings = {}
    if os.path.exists(config):
        with open(config, 'r') as f:
            settings = load(f.read(), Loader=Loader) or {}
        ctx.default_map = settings
    ctx.obj = TimesheetContext(settings)
    ctx.call_on_close(ctx.obj.close)


entry_point.add_command(template)
entry_point.add_command(log)
entry_point.add_command(month)
entry_point.add_command(export)


if __name__ == '__main__':
    entry_point()
