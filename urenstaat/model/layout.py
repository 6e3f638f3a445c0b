"""Fixed-format timesheet report ("urenstaat") as a list of placements.

The plan only describes where labels, numbers, formulas and images go and
which named style they use; ``urenstaat.model.excel`` turns it into a
workbook. All coordinates are 0-indexed (row, column).
"""
import datetime
import typing
from dataclasses import dataclass, field

from urenstaat.common import MonthKey, Weekday
from urenstaat.errors import InvalidDate
from urenstaat.model.timesheet import EmployeeInfo

MONTH_NAMES = ['Januari', 'Februari', 'Maart', 'April', 'Mei', 'Juni', 'Juli', 'Augustus', 'September',
               'Oktober', 'November', 'December']

VAT_RATE = 21

LABEL_COLUMN = 1
IDENTITY_COLUMNS = (2, 9)
PERIOD_LABEL_COLUMNS = (12, 15)
PERIOD_VALUE_COLUMNS = (16, 20)
RIGHT_COLUMN = 23

CALENDAR_ROW = 14
HOURS_ROW = 16
EXTRA_ROWS = 4
GRID_DAYS = 31
FIRST_DAY_COLUMN = 2
LAST_DAY_COLUMN = FIRST_DAY_COLUMN + GRID_DAYS - 1
TOTAL_COLUMN = LAST_DAY_COLUMN + 1
TOTALS_ROW = HOURS_ROW + 1 + EXTRA_ROWS

EXPENSE_TITLE_ROW = TOTALS_ROW + 3
EXPENSE_HEADER_ROW = EXPENSE_TITLE_ROW + 1
EXPENSE_LINES = 4
EXPENSE_TOTAL_ROW = EXPENSE_HEADER_ROW + EXPENSE_LINES + 1
EXPENSE_DATE_COLUMNS = (1, 2)
EXPENSE_DESCRIPTION_COLUMNS = (3, 22)
EXPENSE_EXCL_COLUMNS = (23, 26)
EXPENSE_VAT_COLUMNS = (27, 29)
EXPENSE_INCL_COLUMNS = (30, 33)

SIGNATURE_ROW = EXPENSE_TOTAL_ROW + 3
SIGNATURE_HEIGHT = 120
CLIENT_SIGNATURE_COLUMNS = (1, 9)
EMPLOYEE_SIGNATURE_COLUMNS = (23, 32)

LOGO_CELL = (2, 23)
PRINT_AREA = (0, 0, 45, 33)


def column_name(column: int) -> str:
    """Spreadsheet letters of a 0-indexed column: 0 -> A, 33 -> AH."""
    name = ''
    column += 1
    while column:
        column, remainder = divmod(column - 1, 26)
        name = chr(ord('A') + remainder) + name
    return name


def cell_name(row: int, column: int) -> str:
    return f'{column_name(column)}{row + 1}'


def _sum(first_row: int, first_column: int, last_row: int, last_column: int) -> str:
    return f'=SUM({cell_name(first_row, first_column)}:{cell_name(last_row, last_column)})'


@dataclass(frozen=True)
class Label:
    row: int
    column: int
    value: str
    style: str


@dataclass(frozen=True)
class MergedLabel:
    row: int
    column: int
    row_span: int
    col_span: int
    value: str
    style: str


@dataclass(frozen=True)
class Number:
    row: int
    column: int
    value: float
    style: str


@dataclass(frozen=True)
class Formula:
    row: int
    column: int
    formula: str
    style: str


@dataclass(frozen=True)
class Blank:
    row: int
    column: int
    style: str


@dataclass(frozen=True)
class Image:
    row: int
    column: int
    name: str
    max_width: int = 300
    max_height: int = 200


@dataclass(frozen=True)
class ColumnWidth:
    column: int
    width: float


@dataclass(frozen=True)
class RowHeight:
    row: int
    height: float


Placement = typing.Union[Label, MergedLabel, Number, Formula, Blank, Image, ColumnWidth, RowHeight]


@dataclass(frozen=True)
class Margins:
    left: float = 0.25
    right: float = 0.25
    top: float = 0.5
    bottom: float = 0.5
    header: float = 0.25
    footer: float = 0.25


@dataclass(frozen=True)
class PageSetup:
    landscape: bool = True
    paper_size: int = 9
    fit_to_width: int = 1
    fit_to_height: int = 1
    print_area: typing.Tuple[int, int, int, int] = PRINT_AREA
    print_gridlines: bool = False
    margins: Margins = field(default_factory=Margins)
    protected: bool = True


@dataclass(frozen=True)
class LayoutPlan:
    placements: typing.Tuple[Placement, ...]
    page: PageSetup = field(default_factory=PageSetup)

    def __iter__(self):
        return iter(self.placements)

    def __len__(self):
        return len(self.placements)

    def at(self, row: int, column: int) -> typing.List[Placement]:
        return [placement for placement in self.placements
                if getattr(placement, 'row', None) == row and getattr(placement, 'column', None) == column]


class ReportLayout:
    """Builds the placements of a monthly timesheet for one project."""

    def __init__(self, project: str, month: MonthKey, employee: EmployeeInfo,
                 hours_for_date: typing.Callable[[datetime.date], typing.Optional[float]],
                 fill_date: datetime.date, address: typing.Sequence[str] = ()):
        self._project = project
        self._month = month
        self._employee = employee
        self._hours_for_date = hours_for_date
        self._fill_date = fill_date.strftime('%d-%m-%Y')
        self._address = tuple(address)
        self._placements = []

    def build(self) -> LayoutPlan:
        self._placements = []
        self._columns()
        self._identity()
        self._period()
        self._calendar()
        self._hours()
        self._totals()
        self._expenses()
        self._signatures()
        return LayoutPlan(tuple(self._placements))

    def _add(self, placement: Placement):
        self._placements.append(placement)

    def _merge(self, row: int, columns: typing.Tuple[int, int], value: str, style: str):
        first, last = columns
        self._add(MergedLabel(row, first, 1, last - first + 1, value, style))

    def _columns(self):
        for column in range(0, TOTAL_COLUMN):
            self._add(ColumnWidth(column, 20 if column == LABEL_COLUMN else 6))
        self._add(ColumnWidth(TOTAL_COLUMN, 10))

    def _identity(self):
        self._add(Label(1, LABEL_COLUMN, 'TIJDVERANTWOORDINGSFORMULIER', 'title'))
        for row, label, value, style in (
            (3, 'Naam medewerker', self._employee.name, 'header'),
            (4, 'Functie in opdracht', self._employee.title, 'header_unlocked'),
            (5, 'Telefoonnummer', self._employee.phone, 'header_unlocked'),
            (7, 'Opdrachtgever', self._project, 'header_unlocked'),
            (8, 'Functie', '', 'header_unlocked'),
            (9, 'Projectnaam', '', 'header_unlocked'),
            (10, 'Projectnummer', '', 'header_unlocked'),
        ):
            self._add(Label(row, LABEL_COLUMN, label, 'header'))
            self._merge(row, IDENTITY_COLUMNS, value, style)
        self._add(Image(*LOGO_CELL, 'logo'))
        for offset, line in enumerate(self._address):
            self._add(Label(7 + offset, RIGHT_COLUMN, line, 'header_address'))

    def _period(self):
        for row, label, value, style in (
            (3, 'Maand', MONTH_NAMES[self._month.month - 1], 'header'),
            (4, 'Jaar', str(self._month.year), 'header'),
            (5, 'Invuldatum', self._fill_date, 'header_unlocked'),
        ):
            self._merge(row, PERIOD_LABEL_COLUMNS, label, 'header')
            self._merge(row, PERIOD_VALUE_COLUMNS, value, style)

    def _grid_dates(self) -> typing.Iterator[typing.Tuple[int, typing.Optional[datetime.date]]]:
        for day in range(1, GRID_DAYS + 1):
            try:
                yield FIRST_DAY_COLUMN + day - 1, self._month.date(day)
            except InvalidDate:
                yield FIRST_DAY_COLUMN + day - 1, None

    def _calendar(self):
        for column, date in self._grid_dates():
            if date is None:
                self._add(Blank(CALENDAR_ROW, column, 'sheet_header'))
                self._add(Blank(CALENDAR_ROW + 1, column, 'sheet_header'))
            else:
                self._add(Label(CALENDAR_ROW, column, Weekday.of(date).abbreviation, 'sheet_header'))
                self._add(Number(CALENDAR_ROW + 1, column, date.day, 'sheet_header'))
        self._add(Label(CALENDAR_ROW + 1, TOTAL_COLUMN, 'Totaal', 'sheet_rowtotal'))

    def _hours(self):
        self._add(Label(HOURS_ROW, LABEL_COLUMN, 'Gewerkte uren', 'sheet_description'))
        for column, date in self._grid_dates():
            hours = self._hours_for_date(date) if date is not None else None
            if hours is not None and hours > 0:
                self._add(Number(HOURS_ROW, column, hours, 'sheet_hours'))
            else:
                self._add(Blank(HOURS_ROW, column, 'sheet_hours'))
        for row in range(HOURS_ROW + 1, HOURS_ROW + 1 + EXTRA_ROWS):
            self._add(Blank(row, LABEL_COLUMN, 'sheet_description_unlocked'))
            for column, date in self._grid_dates():
                self._add(Blank(row, column, 'sheet_hours' if date is None else 'sheet_hours_unlocked'))

    def _totals(self):
        for row in range(HOURS_ROW, TOTALS_ROW):
            self._add(Formula(row, TOTAL_COLUMN, _sum(row, FIRST_DAY_COLUMN, row, LAST_DAY_COLUMN),
                              'sheet_rowtotal'))
        self._add(Label(TOTALS_ROW, LABEL_COLUMN, 'Totaal facturabel', 'sheet_total_description'))
        for column, date in self._grid_dates():
            if date is None:
                self._add(Blank(TOTALS_ROW, column, 'sheet_daytotal'))
                continue
            self._add(Formula(TOTALS_ROW, column, _sum(HOURS_ROW, column, TOTALS_ROW - 1, column), 'sheet_daytotal'))
        self._add(Formula(TOTALS_ROW, TOTAL_COLUMN, _sum(TOTALS_ROW, FIRST_DAY_COLUMN, TOTALS_ROW, LAST_DAY_COLUMN),
                          'sheet_rowtotal'))

    def _expenses(self):
        self._add(Label(EXPENSE_TITLE_ROW, LABEL_COLUMN, 'Onkostendeclaratie medewerker (bonnen bijvoegen)',
                        'footer_header'))
        row = EXPENSE_HEADER_ROW
        self._merge(row, EXPENSE_DATE_COLUMNS, 'Datum', 'header_expenses')
        self._merge(row, EXPENSE_DESCRIPTION_COLUMNS, 'Omschrijving', 'header_expenses')
        self._merge(row, EXPENSE_EXCL_COLUMNS, 'Bedrag excl. BTW', 'header_expenses_total')
        self._merge(row, EXPENSE_VAT_COLUMNS, 'BTW', 'header_expenses_total')
        self._merge(row, EXPENSE_INCL_COLUMNS, 'Bedrag incl.', 'header_expenses_total')

        for row in range(EXPENSE_HEADER_ROW + 1, EXPENSE_TOTAL_ROW):
            self._merge(row, EXPENSE_DATE_COLUMNS, '', 'expenses_date')
            self._merge(row, EXPENSE_DESCRIPTION_COLUMNS, '', 'expenses_description')
            self._merge(row, EXPENSE_EXCL_COLUMNS, '', 'expenses_amount')
            self._merge(row, EXPENSE_VAT_COLUMNS, '', 'expenses_amount')
            self._merge(row, EXPENSE_INCL_COLUMNS, '', 'expenses_amount_unlocked')
            incl = cell_name(row, EXPENSE_INCL_COLUMNS[0])
            self._add(Formula(row, EXPENSE_EXCL_COLUMNS[0], f'={incl}/{100 + VAT_RATE}*100', 'expenses_amount'))
            self._add(Formula(row, EXPENSE_VAT_COLUMNS[0], f'={incl}/{100 + VAT_RATE}*{VAT_RATE}', 'expenses_amount'))

        row = EXPENSE_TOTAL_ROW
        self._add(Label(row, EXPENSE_DESCRIPTION_COLUMNS[0], 'Totaal', 'expenses_total_description'))
        for columns in (EXPENSE_EXCL_COLUMNS, EXPENSE_VAT_COLUMNS, EXPENSE_INCL_COLUMNS):
            self._merge(row, columns, '', 'expenses_amount')
            self._add(Formula(row, columns[0], _sum(EXPENSE_HEADER_ROW + 1, columns[0], row - 1, columns[0]),
                              'expenses_amount'))

    def _signatures(self):
        for column, (first, last), title, name, signature, image in (
            (LABEL_COLUMN, CLIENT_SIGNATURE_COLUMNS, 'Opdrachtgever:', self._project,
             'Handtekening opdrachtgever:', 'client_signature'),
            (RIGHT_COLUMN, EMPLOYEE_SIGNATURE_COLUMNS, 'Medewerker:', self._employee.name,
             'Handtekening medewerker:', 'employee_signature'),
        ):
            self._add(Label(SIGNATURE_ROW, column, title, 'footer_header'))
            self._add(Label(SIGNATURE_ROW + 1, column, name, 'footer'))
            self._add(Label(SIGNATURE_ROW + 2, column, 'Datum:', 'footer_header'))
            self._add(Label(SIGNATURE_ROW + 3, column, self._fill_date, 'footer_date'))
            self._add(Label(SIGNATURE_ROW + 4, column, signature, 'footer_header'))
            self._merge(SIGNATURE_ROW + 5, (first, last), '', 'footer_signature')
            self._add(Image(SIGNATURE_ROW + 5, first, image))
        self._add(RowHeight(SIGNATURE_ROW + 5, SIGNATURE_HEIGHT))


def build_layout(project: str, month: MonthKey, employee: EmployeeInfo,
                 hours_for_date: typing.Callable[[datetime.date], typing.Optional[float]],
                 fill_date: datetime.date = None, address: typing.Sequence[str] = ()) -> LayoutPlan:
    return ReportLayout(project, month, employee, hours_for_date,
                        fill_date or datetime.date.today(), address).build()
