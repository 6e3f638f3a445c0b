import contextlib
import logging
import typing
from dataclasses import dataclass, field

from sqlalchemy import (Column, Float, Integer, MetaData, String, Table, UniqueConstraint, create_engine, delete,
                        insert, select, text, update)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from urenstaat.common import DayHours, Weekday, validate_hours
from urenstaat.errors import DuplicateKey, InvalidValue, StorageError
from urenstaat.model.timesheet import Entry, Template, WeekRow

logger = logging.getLogger(__name__)

metadata = MetaData()


def _day_columns():
    return [Column(day.column, Float, nullable=False, default=0, server_default=text('0')) for day in Weekday]


templates_table = Table(
    'templates', metadata,
    Column('id', Integer, primary_key=True),
    Column('project', String, nullable=False, unique=True),
    *_day_columns(),
)

timesheets_table = Table(
    'timesheets', metadata,
    Column('id', Integer, primary_key=True),
    Column('week', String, nullable=False),
    Column('project', String, nullable=False),
    *_day_columns(),
    UniqueConstraint('week', 'project'),
)


class Database:
    """Handle on the timesheet database, passed explicitly to the stores."""

    def __init__(self, url: str, echo: bool = False):
        try:
            self._engine = create_engine(url, echo=echo)
        except SQLAlchemyError as e:
            raise StorageError(f'cannot open database {url}: {e}') from e

    @classmethod
    def open(cls, path, echo: bool = False) -> 'Database':
        database = cls(f'sqlite:///{path}', echo=echo)
        database.init()
        return database

    def init(self):
        with self.transaction() as connection:
            metadata.create_all(connection)

    def close(self):
        self._engine.dispose()

    @contextlib.contextmanager
    def transaction(self, conflict: str = 'uniqueness violation'):
        try:
            with self._engine.begin() as connection:
                yield connection
        except IntegrityError as e:
            raise DuplicateKey(conflict) from e
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _hours(row) -> DayHours:
    try:
        return DayHours.from_columns(row._mapping)
    except InvalidValue as e:
        raise StorageError(f'corrupt hours in row #{row.id} ({row.project}): {e}') from e


class TemplateStore:

    def __init__(self, database: Database):
        self._database = database

    def list(self) -> typing.List[Template]:
        query = select(templates_table).order_by(templates_table.c.id)
        with self._database.transaction() as connection:
            return [Template(row.project, _hours(row), row.id) for row in connection.execute(query)]

    def create(self, project: str, hours: DayHours = None) -> Template:
        hours = DayHours() if hours is None else hours
        statement = insert(templates_table).values(project=project, **hours.as_columns())
        with self._database.transaction(conflict=f'template for {project!r} already exists') as connection:
            template_id = connection.execute(statement).inserted_primary_key[0]
        logger.debug('created template #%s for %s', template_id, project)
        return Template(project, hours, template_id)

    def update(self, template_id: int, hours: DayHours):
        statement = update(templates_table).where(templates_table.c.id == template_id).values(**hours.as_columns())
        with self._database.transaction() as connection:
            if connection.execute(statement).rowcount == 0:
                raise StorageError(f'template #{template_id} not found')

    def delete(self, template_id: int):
        statement = delete(templates_table).where(templates_table.c.id == template_id)
        with self._database.transaction() as connection:
            if connection.execute(statement).rowcount == 0:
                raise StorageError(f'template #{template_id} not found')
        logger.debug('deleted template #%s', template_id)


@dataclass
class SeedResult:
    created: typing.List[Entry] = field(default_factory=list)
    skipped: typing.List[str] = field(default_factory=list)


class EntryStore:

    def __init__(self, database: Database):
        self._database = database

    @staticmethod
    def _entry(row) -> Entry:
        return Entry(row.week, row.project, _hours(row), row.id)

    def list_week(self, week) -> typing.List[Entry]:
        query = (select(timesheets_table)
                 .where(timesheets_table.c.week == str(week))
                 .order_by(timesheets_table.c.id))
        with self._database.transaction() as connection:
            return [self._entry(row) for row in connection.execute(query)]

    def list_project(self, project: str) -> typing.List[Entry]:
        query = (select(timesheets_table)
                 .where(timesheets_table.c.project == project)
                 .order_by(timesheets_table.c.week, timesheets_table.c.id))
        with self._database.transaction() as connection:
            return [self._entry(row) for row in connection.execute(query)]

    def rows(self) -> typing.List[WeekRow]:
        query = select(timesheets_table).order_by(timesheets_table.c.id)
        with self._database.transaction() as connection:
            return [WeekRow(row.week, row.project, _hours(row)) for row in connection.execute(query)]

    def projects(self) -> typing.List[str]:
        query = select(timesheets_table.c.project).distinct().order_by(timesheets_table.c.project)
        with self._database.transaction() as connection:
            return list(connection.execute(query).scalars())

    def create(self, week, project: str, hours: DayHours = None) -> Entry:
        hours = DayHours() if hours is None else hours
        statement = insert(timesheets_table).values(week=str(week), project=project, **hours.as_columns())
        with self._database.transaction(conflict=f'{project!r} is already logged for {week}') as connection:
            entry_id = connection.execute(statement).inserted_primary_key[0]
        logger.debug('created entry #%s for %s in %s', entry_id, project, week)
        return Entry(str(week), project, hours, entry_id)

    def set_day(self, entry_id: int, day: Weekday, value: float):
        hours = validate_hours(value)
        statement = (update(timesheets_table)
                     .where(timesheets_table.c.id == entry_id)
                     .values({day.column: hours}))
        with self._database.transaction() as connection:
            if connection.execute(statement).rowcount == 0:
                raise StorageError(f'entry #{entry_id} not found')

    def delete(self, entry_id: int):
        statement = delete(timesheets_table).where(timesheets_table.c.id == entry_id)
        with self._database.transaction() as connection:
            if connection.execute(statement).rowcount == 0:
                raise StorageError(f'entry #{entry_id} not found')
        logger.debug('deleted entry #%s', entry_id)

    def seed(self, week, templates: typing.Iterable[Template]) -> SeedResult:
        """Copy every template into ``week``, skipping projects already logged for it."""
        result = SeedResult()
        existing = {entry.project for entry in self.list_week(week)}
        for template in templates:
            if template.project in existing:
                logger.info('skipping %s, already logged for %s', template.project, week)
                result.skipped.append(template.project)
                continue
            result.created.append(self.create(week, template.project, template.hours))
            existing.add(template.project)
        return result
