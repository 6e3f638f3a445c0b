import enum
import logging
import typing

import click

from urenstaat.common import WeekKey
from urenstaat.errors import StorageError, TimesheetError
from urenstaat.model.store import EntryStore, TemplateStore
from urenstaat.model.timesheet import Entry, Template
from urenstaat.presenter import Presenter
from urenstaat.prompts import choose, choose_day, prompt_hours, prompt_week_hours

logger = logging.getLogger(__name__)


class State(enum.Enum):
    LISTING = 'listing'
    CREATING = 'creating'
    EDITING = 'editing'
    DELETING = 'deleting'
    EXITING = 'exiting'


class ManagementLoop:
    """List, then create / edit / delete until the user exits.

    Errors of a single action are printed and the loop goes back to listing;
    storage failures and errors while listing end the loop.
    """

    _actions: typing.Mapping[str, State] = {}

    def __init__(self, presenter: Presenter = None):
        self._presenter = presenter or Presenter()

    def run(self):
        state = State.LISTING
        while state is not State.EXITING:
            state = self.step(state)

    def step(self, state: State) -> State:
        handler = {
            State.LISTING: self.listing,
            State.CREATING: self.creating,
            State.EDITING: self.editing,
            State.DELETING: self.deleting,
        }[state]
        try:
            return handler()
        except StorageError:
            raise
        except TimesheetError as e:
            if state is State.LISTING:
                raise
            click.secho(f'Error: {e}', fg='red')
            return State.LISTING

    def listing(self) -> State:
        self.show()
        action = click.prompt(f'Action ({", ".join(self._actions)})',
                              type=click.Choice(list(self._actions), case_sensitive=False))
        return self._actions[action.lower()]

    def show(self):
        raise NotImplementedError

    def creating(self) -> State:
        return State.LISTING

    def editing(self) -> State:
        return State.LISTING

    def deleting(self) -> State:
        return State.LISTING


def _select(label: str, records: typing.Sequence[typing.Union[Template, Entry]]):
    by_project = {record.project: record for record in records}
    return by_project[choose(label, list(by_project))]


class TemplateLoop(ManagementLoop):

    _actions = {
        'create': State.CREATING,
        'edit': State.EDITING,
        'delete': State.DELETING,
        'exit': State.EXITING,
    }

    def __init__(self, store: TemplateStore, presenter: Presenter = None):
        super().__init__(presenter)
        self._store = store
        self._templates = []

    def show(self):
        self._templates = self._store.list()
        click.echo('\n--- Template Management (Daily Defaults) ---')
        self._presenter.week('Templates', [(template.project, template.hours) for template in self._templates])

    def creating(self) -> State:
        project = click.prompt('Project Name', default='', show_default=False).strip()
        if not project:
            return State.LISTING
        self._store.create(project, prompt_week_hours())
        return State.LISTING

    def editing(self) -> State:
        if not self._templates:
            return State.LISTING
        template = _select('Select Project', self._templates)
        self._store.update(template.id, prompt_week_hours(template.hours))
        return State.LISTING

    def deleting(self) -> State:
        if not self._templates:
            return State.LISTING
        template = _select('Select Project', self._templates)
        if click.confirm('Are you sure?', default=False):
            self._store.delete(template.id)
        return State.LISTING


class EntryLoop(ManagementLoop):
    """Entries of a single week."""

    _actions = {
        'edit': State.EDITING,
        'add': State.CREATING,
        'remove': State.DELETING,
        'exit': State.EXITING,
    }

    def __init__(self, week: WeekKey, store: EntryStore, templates: TemplateStore, presenter: Presenter = None):
        super().__init__(presenter)
        self._week = str(week)
        self._store = store
        self._templates = templates
        self._entries = []
        self._seed_offered = False

    def listing(self) -> State:
        self._entries = self._store.list_week(self._week)
        if not self._entries and not self._seed_offered:
            self._seed_offered = True
            click.echo(f'No entries found for {self._week}.')
            if click.confirm('Load defaults from Templates?', default=False):
                self.seed()
                return State.LISTING
        return super().listing()

    def seed(self):
        result = self._store.seed(self._week, self._templates.list())
        if result.created:
            click.echo(f'Loaded {len(result.created)} project(s) from templates.')
        else:
            click.echo('No templates to load.')
        for project in result.skipped:
            click.secho(f'Skipped {project}: already logged for {self._week}', fg='yellow')

    def show(self):
        click.echo(f'\n--- Timesheet: {self._week} ---')
        self._presenter.week(self._week, [(entry.project, entry.hours) for entry in self._entries])

    def editing(self) -> State:
        if not self._entries:
            return State.LISTING
        entry = _select('Select Project', self._entries)
        day = choose_day()
        value = prompt_hours(f'Hours for {day.label}', entry.hours[day])
        self._store.set_day(entry.id, day, value)
        return State.LISTING

    def creating(self) -> State:
        project = click.prompt('Project Name', default='', show_default=False).strip()
        if project:
            self._store.create(self._week, project)
        return State.LISTING

    def deleting(self) -> State:
        if not self._entries:
            return State.LISTING
        entry = _select('Remove', self._entries)
        self._store.delete(entry.id)
        logger.info('removed %s from %s', entry.project, self._week)
        return State.LISTING
