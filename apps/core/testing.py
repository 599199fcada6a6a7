"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Record builders shared by the test suites of every app.
-------------------------------------------------------------------------
"""
from datetime import date, timedelta
from decimal import Decimal
from itertools import count

from django.utils import timezone

from apps.academics.models import (
    AcademicYear, CourseClass, Degree, Department, Semester, Subject,
)
from apps.payroll.models import RateSetting, RateSettingStatus, RateType
from apps.teaching.models import AssignmentStatus, Position, Teacher, TeachingAssignment


def days_ago(days: int) -> date:
    return timezone.localdate() - timedelta(days=days)


def create_calendar(start_year: int = 2024):
    """An academic year with its first semester."""
    academic_year = AcademicYear.objects.create(
        start_year=start_year,
        start_date=date(start_year, 9, 1),
        end_date=date(start_year + 1, 8, 31),
    )
    semester = Semester.objects.create(
        academic_year=academic_year,
        semester_number=1,
        start_date=date(start_year, 9, 1),
        end_date=date(start_year + 1, 1, 15),
    )
    return academic_year, semester


def create_department(code: str = 'CNTT', name: str = 'Công nghệ thông tin') -> Department:
    return Department.objects.create(code=code, name=name)


def create_degree(code: str = 'TS', coefficient: str = '1.50') -> Degree:
    return Degree.objects.create(code=code, name=f'Bằng {code}', coefficient=Decimal(coefficient))


def create_subject(department: Department, code: str = 'INT1001', credits: int = 3) -> Subject:
    return Subject.objects.create(code=code, name=f'Môn {code}', credits=credits, department=department)


def create_class(semester: Semester, subject: Subject, code: str = 'INT1001.01',
                 day_of_week=2, start_period=1, periods_count: int = 3, **extra) -> CourseClass:
    return CourseClass.objects.create(
        code=code,
        name=f'Lớp {code}',
        semester=semester,
        subject=subject,
        day_of_week=day_of_week,
        start_period=start_period,
        periods_count=periods_count,
        **extra
    )


def create_teacher(department: Department, degree: Degree, code: str = 'GV001',
                   service_days: int = 2265, position: str = Position.LECTURER, **extra) -> Teacher:
    """Default hire date gives six full years of service."""
    return Teacher.objects.create(
        code=code,
        full_name=f'Giảng viên {code}',
        email=f'{code.lower()}@university.edu.vn',
        department=department,
        degree=degree,
        position=position,
        hire_date=days_ago(service_days),
        **extra
    )


def create_assignment(teacher: Teacher, course_class: CourseClass, hours: str = '40',
                      status: str = AssignmentStatus.CONFIRMED, **extra) -> TeachingAssignment:
    return TeachingAssignment.objects.create(
        teacher=teacher,
        course_class=course_class,
        teaching_hours=Decimal(hours),
        status=status,
        **extra
    )


_rate_codes = count(1)


def create_rate(base_amount: str = '100000', rate_type: str = RateType.BASE_HOURLY,
                status: str = RateSettingStatus.ACTIVE, **extra) -> RateSetting:
    """An active, currently effective university-wide rate unless overridden."""
    values = {
        'code': f'TR{next(_rate_codes):04d}',
        'name': f'Mức {rate_type}',
        'rate_type': rate_type,
        'base_amount': Decimal(base_amount),
        'effective_start': days_ago(30),
        'status': status,
    }
    values.update(extra)
    return RateSetting.objects.create(**values)
