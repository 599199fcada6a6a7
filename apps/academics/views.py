"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: JSON endpoints for academic years, semesters, departments,
             degrees, subjects and classes.
-------------------------------------------------------------------------
"""
from django import forms

from apps.academics.forms import (
    AcademicYearForm, CourseClassForm, DegreeForm, DepartmentForm, SemesterForm, SubjectForm,
)
from apps.academics.models import (
    AcademicYear, CourseClass, Degree, Department, Semester, Subject,
)
from apps.academics.serializers import (
    serialize_academic_year, serialize_course_class, serialize_degree,
    serialize_department, serialize_semester, serialize_subject,
)
from apps.academics.services import (
    check_room_available, ensure_academic_year_deletable, ensure_class_deletable,
    ensure_degree_deletable, ensure_department_deletable, ensure_semester_deletable,
    ensure_subject_deletable,
)
from apps.core.views import ModelDetailView, ModelListView
from apps.teaching.services import check_class_teacher_conflicts

SCHEDULE_FIELDS = {'day_of_week', 'start_period', 'periods_count'}


# =====================================================================
# ACADEMIC YEARS
# =====================================================================

class AcademicYearListView(ModelListView):
    model = AcademicYear
    form_class = AcademicYearForm
    serializer = serialize_academic_year
    filter_map = {'status': 'status', 'is_active': 'is_active'}
    search_fields = ('code', 'name')
    created_message = "Tạo năm học thành công."


class AcademicYearDetailView(ModelDetailView):
    model = AcademicYear
    form_class = AcademicYearForm
    serializer = serialize_academic_year
    delete_guard = ensure_academic_year_deletable
    not_found_message = "Không tìm thấy năm học."


# =====================================================================
# SEMESTERS
# =====================================================================

class SemesterListView(ModelListView):
    model = Semester
    form_class = SemesterForm
    serializer = serialize_semester
    filter_map = {
        'academic_year': 'academic_year__public_id',
        'status': 'status',
        'semester_type': 'semester_type',
        'is_active': 'is_active',
    }
    search_fields = ('code', 'name')
    created_message = "Tạo học kỳ thành công."

    def get_queryset(self):
        return Semester.objects.select_related('academic_year')


class SemesterDetailView(ModelDetailView):
    model = Semester
    form_class = SemesterForm
    serializer = serialize_semester
    delete_guard = ensure_semester_deletable
    not_found_message = "Không tìm thấy học kỳ."


# =====================================================================
# DEPARTMENTS AND DEGREES
# =====================================================================

class DepartmentListView(ModelListView):
    model = Department
    form_class = DepartmentForm
    serializer = serialize_department
    filter_map = {'is_active': 'is_active'}
    search_fields = ('code', 'name')
    created_message = "Tạo khoa thành công."


class DepartmentDetailView(ModelDetailView):
    model = Department
    form_class = DepartmentForm
    serializer = serialize_department
    delete_guard = ensure_department_deletable
    not_found_message = "Không tìm thấy khoa."


class DegreeListView(ModelListView):
    model = Degree
    form_class = DegreeForm
    serializer = serialize_degree
    filter_map = {'is_active': 'is_active'}
    search_fields = ('code', 'name')
    created_message = "Tạo học vị thành công."


class DegreeDetailView(ModelDetailView):
    model = Degree
    form_class = DegreeForm
    serializer = serialize_degree
    delete_guard = ensure_degree_deletable
    not_found_message = "Không tìm thấy học vị."


# =====================================================================
# SUBJECTS
# =====================================================================

class SubjectListView(ModelListView):
    model = Subject
    form_class = SubjectForm
    serializer = serialize_subject
    filter_map = {
        'department': 'department__public_id',
        'subject_type': 'subject_type',
        'level': 'level',
        'is_active': 'is_active',
    }
    search_fields = ('code', 'name')
    created_message = "Tạo môn học thành công."

    def get_queryset(self):
        return Subject.objects.select_related('department').prefetch_related('prerequisites')


class SubjectDetailView(ModelDetailView):
    model = Subject
    form_class = SubjectForm
    serializer = serialize_subject
    delete_guard = ensure_subject_deletable
    not_found_message = "Không tìm thấy môn học."


# =====================================================================
# CLASSES
# =====================================================================

class ScheduledClassMixin:
    """Room and teacher conflict checks around class saves."""

    def save_form(self, form: forms.ModelForm):
        course_class = form.instance
        is_new = course_class.pk is None
        course_class.update_status()
        check_room_available(course_class)
        obj = super().save_form(form)
        if not is_new and SCHEDULE_FIELDS & set(form.changed_data):
            check_class_teacher_conflicts(obj)
        return obj


class CourseClassListView(ScheduledClassMixin, ModelListView):
    model = CourseClass
    form_class = CourseClassForm
    serializer = serialize_course_class
    filter_map = {
        'semester': 'semester__public_id',
        'subject': 'subject__public_id',
        'status': 'status',
        'class_type': 'class_type',
        'day_of_week': 'day_of_week',
        'is_active': 'is_active',
    }
    search_fields = ('code', 'name', 'room')
    created_message = "Tạo lớp học thành công."

    def get_queryset(self):
        return CourseClass.objects.select_related('semester', 'subject')


class CourseClassDetailView(ScheduledClassMixin, ModelDetailView):
    model = CourseClass
    form_class = CourseClassForm
    serializer = serialize_course_class
    delete_guard = ensure_class_deletable
    not_found_message = "Không tìm thấy lớp học."
