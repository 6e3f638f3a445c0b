import logging
import os
import tempfile
import typing
from dataclasses import dataclass
from pathlib import Path

from openpyxl.drawing.image import Image as SheetImage
from openpyxl.styles import Alignment, Border, Font, PatternFill, Protection, Side
from openpyxl.utils import get_column_letter
from openpyxl.workbook import Workbook
from openpyxl.worksheet.page import PageMargins

from urenstaat.model.layout import (Blank, ColumnWidth, Formula, Image, Label, LayoutPlan, MergedLabel, Number,
                                    PageSetup, RowHeight)

logger = logging.getLogger(__name__)

FONT_NAME = 'Verdana'
DATE_FORMAT = 'dd-mm-yyyy'
AMOUNT_FORMAT = '€ #,##0.00'

_thin = Side(style='thin')
_medium = Side(style='medium')
THIN = Border(left=_thin, right=_thin, top=_thin, bottom=_thin)
MEDIUM = Border(left=_medium, right=_medium, top=_medium, bottom=_medium)
CALENDAR_FILL = PatternFill('solid', fgColor='FFF28E00')


@dataclass(frozen=True)
class CellStyle:
    bold: bool = False
    size: int = 10
    border: Border = None
    horizontal: str = None
    vertical: str = None
    fill: PatternFill = None
    number_format: str = None
    locked: bool = True

    def apply(self, cell):
        cell.font = Font(name=FONT_NAME, size=self.size, bold=self.bold)
        if self.border:
            cell.border = self.border
        if self.horizontal or self.vertical:
            cell.alignment = Alignment(horizontal=self.horizontal, vertical=self.vertical)
        if self.fill:
            cell.fill = self.fill
        if self.number_format:
            cell.number_format = self.number_format
        if not self.locked:
            cell.protection = Protection(locked=False)


STYLES = {
    'title': CellStyle(bold=True, size=14, horizontal='left'),
    'header': CellStyle(border=THIN),
    'header_unlocked': CellStyle(border=THIN, locked=False),
    'header_address': CellStyle(),
    'sheet_header': CellStyle(border=THIN, horizontal='center', fill=CALENDAR_FILL),
    'sheet_description': CellStyle(border=THIN),
    'sheet_hours': CellStyle(border=THIN, horizontal='center'),
    'sheet_description_unlocked': CellStyle(border=THIN, locked=False),
    'sheet_hours_unlocked': CellStyle(border=THIN, horizontal='center', locked=False),
    'sheet_total_description': CellStyle(bold=True, border=MEDIUM, horizontal='left'),
    'sheet_rowtotal': CellStyle(bold=True, border=MEDIUM, horizontal='center'),
    'sheet_daytotal': CellStyle(bold=True, border=MEDIUM, horizontal='center'),
    'header_expenses': CellStyle(bold=True, border=MEDIUM, horizontal='left'),
    'header_expenses_total': CellStyle(bold=True, border=MEDIUM, horizontal='right'),
    'expenses_date': CellStyle(border=THIN, number_format=DATE_FORMAT, locked=False),
    'expenses_description': CellStyle(border=THIN, locked=False),
    'expenses_amount': CellStyle(border=THIN, number_format=AMOUNT_FORMAT),
    'expenses_amount_unlocked': CellStyle(border=THIN, number_format=AMOUNT_FORMAT, locked=False),
    'expenses_total_description': CellStyle(),
    'footer_header': CellStyle(bold=True, horizontal='left'),
    'footer': CellStyle(horizontal='left', locked=False),
    'footer_date': CellStyle(number_format=DATE_FORMAT, locked=False),
    'footer_signature': CellStyle(bold=True, border=MEDIUM, vertical='top'),
}


def cell_range(row: int, column: int, row_span: int = 1, col_span: int = 1) -> str:
    first = f'{get_column_letter(column + 1)}{row + 1}'
    if row_span == 1 and col_span == 1:
        return first
    return f'{first}:{get_column_letter(column + col_span)}{row + row_span}'


class BaseSheet:

    _title = ''
    _styles = STYLES

    def __init__(self, sheet, title=None, **kwargs):
        self._sheet = sheet
        if title:
            self._title = title
        sheet.title = self._title

    @property
    def sheet(self):
        return self._sheet

    def set_style(self, cell, style: str):
        first_cell = cell.partition(':')[0]
        self._styles[style].apply(self._sheet[first_cell])

    def set_value(self, cell, value, style: str = None):
        first_cell = cell.partition(':')[0]
        self._sheet[first_cell] = value
        if style:
            self.set_style(first_cell, style)
        if ':' in cell:
            self._sheet.merge_cells(cell)


class TimesheetSheet(BaseSheet):
    """Renders a ``LayoutPlan`` on an openpyxl worksheet."""

    _title = 'Urenstaat'

    def __init__(self, sheet, images: typing.Mapping[str, str] = None, **kwargs):
        super().__init__(sheet, **kwargs)
        self._images = dict(images or {})
        self._handlers = {
            Label: self._label,
            MergedLabel: self._merged_label,
            Number: self._number,
            Formula: self._formula,
            Blank: self._blank,
            Image: self._image,
            ColumnWidth: self._column_width,
            RowHeight: self._row_height,
        }

    def render(self, plan: LayoutPlan):
        for placement in plan:
            self._handlers[type(placement)](placement)
        self._page_setup(plan.page)

    def _label(self, placement: Label):
        self.set_value(cell_range(placement.row, placement.column), placement.value, placement.style)

    def _merged_label(self, placement: MergedLabel):
        cell = cell_range(placement.row, placement.column, placement.row_span, placement.col_span)
        self.set_value(cell, placement.value or None, placement.style)

    def _number(self, placement: Number):
        self.set_value(cell_range(placement.row, placement.column), placement.value, placement.style)

    def _formula(self, placement: Formula):
        self.set_value(cell_range(placement.row, placement.column), placement.formula, placement.style)

    def _blank(self, placement: Blank):
        self.set_style(cell_range(placement.row, placement.column), placement.style)

    def _image(self, placement: Image):
        path = self._images.get(placement.name)
        if not path or not Path(path).is_file():
            logger.warning('image %s not found (%s), leaving its cell empty', placement.name, path)
            return
        image = SheetImage(str(path))
        scale = min(placement.max_width / image.width, placement.max_height / image.height)
        image.width = image.width * scale
        image.height = image.height * scale
        self._sheet.add_image(image, cell_range(placement.row, placement.column))

    def _column_width(self, placement: ColumnWidth):
        self._sheet.column_dimensions[get_column_letter(placement.column + 1)].width = placement.width

    def _row_height(self, placement: RowHeight):
        self._sheet.row_dimensions[placement.row + 1].height = placement.height

    def _page_setup(self, page: PageSetup):
        sheet = self._sheet
        sheet.page_setup.orientation = 'landscape' if page.landscape else 'portrait'
        sheet.page_setup.paperSize = page.paper_size
        sheet.sheet_properties.pageSetUpPr.fitToPage = True
        sheet.page_setup.fitToWidth = page.fit_to_width
        sheet.page_setup.fitToHeight = page.fit_to_height
        first_row, first_column, last_row, last_column = page.print_area
        sheet.print_area = cell_range(first_row, first_column, last_row - first_row + 1,
                                      last_column - first_column + 1)
        sheet.print_options.gridLines = page.print_gridlines
        margins = page.margins
        sheet.page_margins = PageMargins(left=margins.left, right=margins.right, top=margins.top,
                                         bottom=margins.bottom, header=margins.header, footer=margins.footer)
        sheet.protection.sheet = page.protected


class TimesheetWorkbookWriter:
    """Builds the workbook in memory and writes it once on a clean exit."""

    def __init__(self, path, images: typing.Mapping[str, str] = None):
        self._path = Path(path)
        self._images = images

    def __enter__(self):
        self._workbook = Workbook()
        return self

    def write(self, plan: LayoutPlan):
        TimesheetSheet(self._workbook.active, self._images).render(plan)

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(suffix='.xlsx', dir=self._path.parent)
        os.close(fd)
        try:
            self._workbook.save(filename=tmp_path)
            os.replace(tmp_path, self._path)
        except BaseException:
            os.unlink(tmp_path)
            raise
