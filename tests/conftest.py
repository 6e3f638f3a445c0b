"""
Shared fixtures: a throwaway SQLite database, stores on top of it and a
config file for CLI runs.
"""
import pytest
import yaml
from click.testing import CliRunner

from urenstaat.common import DayHours
from urenstaat.model.store import Database, EntryStore, TemplateStore


@pytest.fixture
def database(tmp_path):
    database = Database.open(tmp_path / 'timesheet.db')
    yield database
    database.close()


@pytest.fixture
def templates(database):
    return TemplateStore(database)


@pytest.fixture
def entries(database):
    return EntryStore(database)


@pytest.fixture
def acme_week() -> DayHours:
    return DayHours((8, 8, 8, 8, 8, 0, 0))


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({
        'database': str(tmp_path / 'timesheet.db'),
        'output': str(tmp_path / 'out'),
        'employee': {'name': 'Jan Jansen', 'title': 'Architect', 'phone': '0612345678'},
    }))
    return path


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for variable in ('EMPLOYEE_NAME', 'EMPLOYEE_TITLE', 'EMPLOYEE_PHONE'):
        monkeypatch.delenv(variable, raising=False)
    return CliRunner()
