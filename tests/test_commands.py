from openpyxl import load_workbook
from sqlalchemy import update

from urenstaat.cli import entry_point
from urenstaat.common import DayHours, Weekday
from urenstaat.model.store import Database, EntryStore, TemplateStore, timesheets_table

TEMPLATE_INPUT = 'create\nAcme\n8\n8\n8\n8\n8\n0\n0\nexit\n'


def invoke(runner, config_file, *args, **kwargs):
    return runner.invoke(entry_point, ['--config', str(config_file), *args], catch_exceptions=False, **kwargs)


def stores(tmp_path):
    database = Database.open(tmp_path / 'timesheet.db')
    return database, TemplateStore(database), EntryStore(database)


def seed_acme(tmp_path, acme_week, week='2024-W05'):
    database, templates, entries = stores(tmp_path)
    with database:
        templates.create('Acme', acme_week)
        entries.create(week, 'Acme', acme_week)


def test_template_create(runner, config_file, tmp_path, acme_week):
    result = invoke(runner, config_file, 'template', input=TEMPLATE_INPUT)
    assert result.exit_code == 0, result.output
    assert 'Template Management' in result.output
    database, templates, _ = stores(tmp_path)
    with database:
        [template] = templates.list()
    assert template.project == 'Acme'
    assert template.hours == acme_week


def test_template_hours_are_prompted_again_when_negative(runner, config_file, tmp_path):
    result = invoke(runner, config_file, 'template', input='create\nAcme\n-1\n8\n\n\n\n\n\n\nexit\n')
    assert result.exit_code == 0, result.output
    database, templates, _ = stores(tmp_path)
    with database:
        [template] = templates.list()
    assert template.hours == DayHours((8, 0, 0, 0, 0, 0, 0))


def test_template_duplicate_project_is_reported(runner, config_file, tmp_path, acme_week):
    database, templates, _ = stores(tmp_path)
    with database:
        templates.create('Acme', acme_week)
    result = invoke(runner, config_file, 'template', input='create\nAcme\n\n\n\n\n\n\n\nexit\n')
    assert result.exit_code == 0, result.output
    assert 'Error:' in result.output
    with Database.open(tmp_path / 'timesheet.db') as database:
        assert len(TemplateStore(database).list()) == 1


def test_template_delete_needs_confirmation(runner, config_file, tmp_path, acme_week):
    database, templates, _ = stores(tmp_path)
    with database:
        templates.create('Acme', acme_week)
    invoke(runner, config_file, 'template', input='delete\nAcme\nn\nexit\n')
    with Database.open(tmp_path / 'timesheet.db') as database:
        assert len(TemplateStore(database).list()) == 1
    invoke(runner, config_file, 'template', input='delete\nAcme\ny\nexit\n')
    with Database.open(tmp_path / 'timesheet.db') as database:
        assert TemplateStore(database).list() == []


def test_log_loads_templates_into_an_empty_week(runner, config_file, tmp_path, acme_week):
    database, templates, _ = stores(tmp_path)
    with database:
        templates.create('Acme', acme_week)
    result = invoke(runner, config_file, 'log', '--week', '2024-W05', input='y\nexit\n')
    assert result.exit_code == 0, result.output
    assert 'No entries found for 2024-W05.' in result.output
    assert 'Loaded 1 project(s) from templates.' in result.output
    with Database.open(tmp_path / 'timesheet.db') as database:
        [entry] = EntryStore(database).list_week('2024-W05')
    assert entry.project == 'Acme'
    assert entry.hours == acme_week


def test_log_without_templates(runner, config_file):
    result = invoke(runner, config_file, 'log', '--week', '2024-W05', input='y\nexit\n')
    assert result.exit_code == 0, result.output
    assert 'No templates to load.' in result.output


def test_log_edit_single_day(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    result = invoke(runner, config_file, 'log', '-w', '2024-W05', input='edit\nAcme\nsat\n4\nexit\n')
    assert result.exit_code == 0, result.output
    with Database.open(tmp_path / 'timesheet.db') as database:
        [entry] = EntryStore(database).list_week('2024-W05')
    assert entry.hours == acme_week.replace(Weekday.SAT, 4)


def test_log_add_and_remove(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    invoke(runner, config_file, 'log', '-w', '2024-W05', input='add\nGlobex\nremove\nAcme\nexit\n')
    with Database.open(tmp_path / 'timesheet.db') as database:
        [entry] = EntryStore(database).list_week('2024-W05')
    assert entry.project == 'Globex'
    assert entry.hours == DayHours()


def test_log_rejects_week_that_does_not_exist(runner, config_file):
    result = invoke(runner, config_file, 'log', '--week', '2024-W53')
    assert result.exit_code == 2
    assert '2024-W53' in result.output


def test_log_rejects_malformed_week(runner, config_file):
    result = invoke(runner, config_file, 'log', '--week', '2024-5')
    assert result.exit_code == 2


def test_month_matrix(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    result = invoke(runner, config_file, 'month', '--year', '2024', '--month', '1')
    assert result.exit_code == 0, result.output
    assert 'Monthly Overview' in result.output
    assert 'Acme' in result.output
    assert 'TOTAL' in result.output


def test_month_without_data(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    result = invoke(runner, config_file, 'month', '--year', '2024', '--month', '3')
    assert result.exit_code == 0, result.output
    assert 'No data found for 3/2024.' in result.output


def test_month_prompts_for_year_and_month(runner, config_file):
    result = invoke(runner, config_file, 'month', input='2024\n3\n')
    assert result.exit_code == 0, result.output
    assert result.output.index('Year') < result.output.index('Month (1-12)')
    assert 'No data found for 3/2024.' in result.output


def test_month_reports_malformed_weeks(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    database, _, entries = stores(tmp_path)
    with database:
        entries.create('garbage', 'Acme', acme_week)
    result = invoke(runner, config_file, 'month', '--year', '2024', '--month', '1')
    assert '1 row(s) skipped' in result.output


def test_export(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    result = invoke(runner, config_file, 'export', '--year', '2024', '--month', '1', '--project', 'Acme')
    assert result.exit_code == 0, result.output
    path = tmp_path / 'out' / 'Urenstaat_2024_1_Acme.xlsx'
    assert f'File successfully generated: {path}' in result.output
    sheet = load_workbook(path).active
    assert sheet['C4'].value == 'Jan Jansen'
    assert sheet['Q4'].value == 'Januari'
    # 2024-W05 starts on Monday 29 January
    assert sheet['AE17'].value == 8
    assert sheet['AG17'].value == 8
    assert sheet['AD17'].value is None


def test_export_prompts_for_project(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    result = invoke(runner, config_file, 'export', '-y', '2024', '-m', '1', input='Acme\n')
    assert result.exit_code == 0, result.output
    assert (tmp_path / 'out' / 'Urenstaat_2024_1_Acme.xlsx').is_file()


def test_export_without_projects(runner, config_file, tmp_path):
    result = invoke(runner, config_file, 'export', '--year', '2024', '--month', '1')
    assert result.exit_code == 0, result.output
    assert 'No projects found in logs to export.' in result.output
    assert not (tmp_path / 'out').exists()


def test_export_unknown_project(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    result = invoke(runner, config_file, 'export', '--year', '2024', '--month', '1', '--project', 'Initech')
    assert result.exit_code == 1
    assert 'Initech' in result.output


def test_employee_from_environment_wins(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    result = invoke(runner, config_file, 'export', '-y', '2024', '-m', '1', '-p', 'Acme',
                    env={'EMPLOYEE_NAME': 'Piet Pietersen'})
    assert result.exit_code == 0, result.output
    sheet = load_workbook(tmp_path / 'out' / 'Urenstaat_2024_1_Acme.xlsx').active
    assert sheet['C4'].value == 'Piet Pietersen'
    assert sheet['C5'].value == 'Architect'


def test_unusable_database_is_reported(runner, tmp_path):
    config_file = tmp_path / 'config.yaml'
    config_file.write_text(f'database: {tmp_path / "missing" / "timesheet.db"}\n')
    result = invoke(runner, config_file, 'month', '--year', '2024', '--month', '1')
    assert result.exit_code == 1
    assert 'storage failure' in result.output


def corrupt_saturday(tmp_path):
    with Database.open(tmp_path / 'timesheet.db') as database:
        with database.transaction() as connection:
            connection.execute(update(timesheets_table).values(sat=-1))


def test_log_stops_on_corrupt_row(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    corrupt_saturday(tmp_path)
    result = invoke(runner, config_file, 'log', '-w', '2024-W05', input='exit\n')
    assert result.exit_code == 1
    assert 'storage failure: corrupt hours' in result.output


def test_month_reports_corrupt_row(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    corrupt_saturday(tmp_path)
    result = invoke(runner, config_file, 'month', '--year', '2024', '--month', '1')
    assert result.exit_code == 1
    assert 'storage failure: corrupt hours' in result.output


def test_export_reports_corrupt_row(runner, config_file, tmp_path, acme_week):
    seed_acme(tmp_path, acme_week)
    corrupt_saturday(tmp_path)
    result = invoke(runner, config_file, 'export', '-y', '2024', '-m', '1', '-p', 'Acme')
    assert result.exit_code == 1
    assert not (tmp_path / 'out').exists()
