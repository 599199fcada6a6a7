"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Excel export of salary calculations.
-------------------------------------------------------------------------
"""
from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

SALARY_COLUMNS = [
    ('Mã bảng lương', lambda c: c.calculation_code, 18),
    ('Mã giảng viên', lambda c: c.teacher.code, 14),
    ('Họ tên', lambda c: c.teacher.full_name, 28),
    ('Khoa', lambda c: c.teacher.department.name if c.teacher.department_id else '', 24),
    ('Năm học', lambda c: c.academic_year.code, 12),
    ('Học kì', lambda c: c.semester.code, 12),
    ('Kỳ tính', lambda c: c.get_period_type_display(), 12),
    ('Từ ngày', lambda c: c.period_start, 12),
    ('Đến ngày', lambda c: c.period_end, 12),
    ('Giờ chuẩn', lambda c: float(c.total_base_hours), 10),
    ('Lương cơ bản', lambda c: float(c.total_base_amount), 16),
    ('Giờ vượt', lambda c: float(c.total_overtime_hours), 10),
    ('Lương vượt giờ', lambda c: float(c.total_overtime_amount), 16),
    ('Thưởng', lambda c: float(c.total_bonus_amount), 14),
    ('Phụ cấp', lambda c: float(c.total_allowance_amount), 14),
    ('Hệ số (cộng thêm)', lambda c: float(c.total_coefficient_amount), 16),
    ('Tổng lương', lambda c: float(c.total_gross_salary), 16),
    ('Khấu trừ', lambda c: float(c.total_deduction_amount), 14),
    ('Thực lĩnh', lambda c: float(c.total_net_salary), 16),
    ('Trạng thái', lambda c: c.get_status_display(), 14),
]


def build_salary_workbook(calculations) -> Workbook:
    """One header row plus one row per calculation, with a totals row."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Bang luong"

    header_fill = PatternFill(start_color='366092', end_color='366092', fill_type='solid')
    header_font = Font(bold=True, color='FFFFFF')

    for col_num, (header, _value, width) in enumerate(SALARY_COLUMNS, 1):
        cell = ws.cell(row=1, column=col_num)
        cell.value = header
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center', vertical='center')
        ws.column_dimensions[get_column_letter(col_num)].width = width

    row_num = 1
    for row_num, calculation in enumerate(calculations, 2):
        for col_num, (_header, value, _width) in enumerate(SALARY_COLUMNS, 1):
            ws.cell(row=row_num, column=col_num).value = value(calculation)

    if row_num > 1:
        totals_row = row_num + 1
        ws.cell(row=totals_row, column=1).value = 'Tổng cộng'
        ws.cell(row=totals_row, column=1).font = Font(bold=True)
        for col_num in range(10, len(SALARY_COLUMNS)):
            column = get_column_letter(col_num)
            cell = ws.cell(row=totals_row, column=col_num)
            cell.value = f"=SUM({column}2:{column}{row_num})"
            cell.font = Font(bold=True)

    ws.freeze_panes = 'A2'
    return wb


def salary_workbook_response(calculations) -> HttpResponse:
    timestamp = timezone.now().strftime('%Y%m%d_%H%M%S')
    filename = f'salary_calculations_{timestamp}.xlsx'

    response = HttpResponse(content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    build_salary_workbook(calculations).save(response)
    return response
