import datetime

import pytest
from openpyxl import load_workbook
from PIL import Image

from urenstaat.common import MonthKey
from urenstaat.model.excel import STYLES, TimesheetWorkbookWriter, cell_range
from urenstaat.model.layout import build_layout
from urenstaat.model.timesheet import EmployeeInfo


def acme_hours(date):
    return 8.0 if date.weekday() < 5 else None


@pytest.fixture
def plan():
    return build_layout('Acme', MonthKey(2024, 1), EmployeeInfo('Jan Jansen', 'Architect', '0612345678'),
                        acme_hours, datetime.date(2024, 2, 3), ['Street 1'])


@pytest.fixture
def signature(tmp_path):
    path = tmp_path / 'signature.png'
    Image.new('RGB', (600, 200), 'white').save(path)
    return path


def export(path, plan, images=None):
    with TimesheetWorkbookWriter(path, images) as writer:
        writer.write(plan)
    return load_workbook(path).active


def test_cell_range():
    assert cell_range(0, 0) == 'A1'
    assert cell_range(3, 2, 1, 8) == 'C4:J4'
    assert cell_range(0, 0, 46, 34) == 'A1:AH46'


def test_every_style_used_by_the_layout_is_defined(plan):
    used = {placement.style for placement in plan if hasattr(placement, 'style')}
    assert used <= set(STYLES)


def test_values_and_formulas(tmp_path, plan):
    sheet = export(tmp_path / 'out.xlsx', plan)
    assert sheet.title == 'Urenstaat'
    assert sheet['B2'].value == 'TIJDVERANTWOORDINGSFORMULIER'
    assert sheet['C4'].value == 'Jan Jansen'
    assert sheet['Q4'].value == 'Januari'
    assert sheet['X8'].value == 'Street 1'
    assert sheet['C15'].value == 'Ma'
    assert sheet['C16'].value == 1
    assert sheet['C17'].value == 8
    assert sheet['H17'].value is None
    assert sheet['AH17'].value == '=SUM(C17:AG17)'
    assert sheet['C22'].value == '=SUM(C17:C21)'
    assert sheet['AH22'].value == '=SUM(C22:AG22)'
    assert sheet['X27'].value == '=AE27/121*100'
    assert sheet['AB27'].value == '=AE27/121*21'
    assert sheet['X31'].value == '=SUM(X27:X30)'
    assert sheet['X35'].value == 'Jan Jansen'


def test_merges_and_dimensions(tmp_path, plan):
    sheet = export(tmp_path / 'out.xlsx', plan)
    merged = {str(cell) for cell in sheet.merged_cells.ranges}
    assert 'C4:J4' in merged
    assert 'M4:P4' in merged
    assert 'D26:W26' in merged
    assert 'X39:AG39' in merged
    assert sheet.column_dimensions['B'].width == 20
    assert sheet.column_dimensions['C'].width == 6
    assert sheet.column_dimensions['AH'].width == 10
    assert sheet.row_dimensions[39].height == 120


def test_styles_and_protection(tmp_path, plan):
    sheet = export(tmp_path / 'out.xlsx', plan)
    assert sheet.protection.sheet
    assert sheet['C4'].protection.locked
    assert not sheet['C5'].protection.locked
    assert not sheet['C18'].protection.locked
    assert sheet['C15'].fill.fgColor.rgb == 'FFF28E00'
    assert sheet['C15'].font.name == 'Verdana'
    assert sheet['B2'].font.size == 14
    assert sheet['AH22'].font.bold
    assert sheet['X27'].number_format == '€ #,##0.00'


def test_page_setup(tmp_path, plan):
    sheet = export(tmp_path / 'out.xlsx', plan)
    assert sheet.page_setup.orientation == 'landscape'
    assert int(sheet.page_setup.paperSize) == 9
    assert sheet.sheet_properties.pageSetUpPr.fitToPage
    assert '$A$1:$AH$46' in str(sheet.print_area)


def test_images_are_scaled_into_their_box(tmp_path, plan, signature):
    with TimesheetWorkbookWriter(tmp_path / 'out.xlsx', {'employee_signature': str(signature)}) as writer:
        writer.write(plan)
        images = writer._workbook.active._images
    assert len(images) == 1
    assert (images[0].width, images[0].height) == (300, 100)


def test_missing_images_are_skipped(tmp_path, plan):
    sheet = export(tmp_path / 'out.xlsx', plan, {'logo': str(tmp_path / 'nope.jpg')})
    assert sheet['B2'].value == 'TIJDVERANTWOORDINGSFORMULIER'


def test_existing_file_is_overwritten(tmp_path, plan):
    path = tmp_path / 'out.xlsx'
    path.write_text('stale')
    sheet = export(path, plan)
    assert sheet['C17'].value == 8
    assert [p.name for p in tmp_path.iterdir()] == ['out.xlsx']


def test_nothing_is_written_when_rendering_fails(tmp_path, plan):
    path = tmp_path / 'out.xlsx'
    with pytest.raises(RuntimeError):
        with TimesheetWorkbookWriter(path) as writer:
            writer.write(plan)
            raise RuntimeError('boom')
    assert not path.exists()
