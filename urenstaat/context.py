import os
import typing
from pathlib import Path

import click

from urenstaat.model.store import Database, EntryStore, TemplateStore
from urenstaat.model.timesheet import EmployeeInfo

EMPLOYEE_VARIABLES = {
    'name': 'EMPLOYEE_NAME',
    'title': 'EMPLOYEE_TITLE',
    'phone': 'EMPLOYEE_PHONE',
}


class TimesheetContext:

    def __init__(self, config: typing.Mapping = None, environ: typing.Mapping[str, str] = None):
        self._config = dict(config or {})
        self._environ = os.environ if environ is None else environ
        self._database = None

    @property
    def database_path(self) -> Path:
        return Path(self._config.get('database', 'timesheet.db'))

    @property
    def output_dir(self) -> Path:
        return Path(self._config.get('output', '.'))

    @property
    def employee(self) -> EmployeeInfo:
        configured = self._config.get('employee') or {}
        defaults = EmployeeInfo()
        values = {}
        for field, variable in EMPLOYEE_VARIABLES.items():
            values[field] = self._environ.get(variable) or configured.get(field) or getattr(defaults, field)
        return EmployeeInfo(**{field: str(value) for field, value in values.items()})

    @property
    def address(self) -> typing.List[str]:
        return [str(line) for line in (self._config.get('company') or {}).get('address', [])]

    @property
    def images(self) -> typing.Dict[str, str]:
        return {name: str(path) for name, path in (self._config.get('images') or {}).items() if path}

    @property
    def database(self) -> Database:
        if self._database is None:
            self._database = Database.open(self.database_path)
        return self._database

    @property
    def templates(self) -> TemplateStore:
        return TemplateStore(self.database)

    @property
    def entries(self) -> EntryStore:
        return EntryStore(self.database)

    def export_path(self, year: int, month: int, project: str) -> Path:
        return self.output_dir / f'Urenstaat_{year}_{month}_{project.replace("/", "-")}.xlsx'

    def close(self):
        if self._database is not None:
            self._database.close()
            self._database = None


pass_timesheet = click.make_pass_decorator(TimesheetContext)
