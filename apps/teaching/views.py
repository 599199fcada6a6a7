"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: JSON endpoints for teachers and teaching assignments,
             including the assignment workflow and availability checks.
-------------------------------------------------------------------------
"""
from django import forms
from django.db import transaction
from django.http import HttpRequest, JsonResponse

from apps.academics.models import AcademicYear, CourseClass, Semester
from apps.core.exceptions import ValidationFailedException
from apps.core.services import get_by_public_id
from apps.core.views import JsonApiView, ModelDetailView, ModelListView, json_success
from apps.teaching.forms import TeacherForm, TeachingAssignmentForm
from apps.teaching.models import Teacher, TeachingAssignment
from apps.teaching.serializers import serialize_assignment, serialize_teacher
from apps.teaching.services import (
    check_teacher_available, conflict_details, ensure_assignment_deletable,
    ensure_teacher_deletable, find_teacher_conflicts, teacher_assignment_stats,
)
from apps.teaching.workflows import (
    approve_assignment, cancel_assignment, get_valid_transitions, perform_transition,
)

TEACHER_NOT_FOUND = "Không tìm thấy giảng viên."
ASSIGNMENT_NOT_FOUND = "Không tìm thấy phân công giảng dạy."


# =====================================================================
# TEACHERS
# =====================================================================

class TeacherListView(ModelListView):
    model = Teacher
    form_class = TeacherForm
    serializer = serialize_teacher
    filter_map = {
        'department': 'department__public_id',
        'degree': 'degree__public_id',
        'position': 'position',
        'is_active': 'is_active',
    }
    search_fields = ('code', 'full_name', 'email')
    created_message = "Tạo giảng viên thành công."

    def get_queryset(self):
        return Teacher.objects.select_related('department', 'degree')


class TeacherDetailView(ModelDetailView):
    model = Teacher
    form_class = TeacherForm
    serializer = serialize_teacher
    delete_guard = ensure_teacher_deletable
    not_found_message = TEACHER_NOT_FOUND

    def get_queryset(self):
        return Teacher.objects.select_related('department', 'degree')


class TeacherStatisticsView(JsonApiView):
    """Workload summary for one teacher, optionally for one semester or year."""

    def get(self, request: HttpRequest, public_id) -> JsonResponse:
        teacher = get_by_public_id(Teacher, public_id, TEACHER_NOT_FOUND)
        semester = academic_year = None
        if request.GET.get('semester'):
            semester = get_by_public_id(Semester, request.GET['semester'], "Không tìm thấy học kỳ.")
        if request.GET.get('academic_year'):
            academic_year = get_by_public_id(
                AcademicYear, request.GET['academic_year'], "Không tìm thấy năm học."
            )
        return json_success(teacher_assignment_stats(teacher, semester, academic_year))


class TeacherAvailabilityView(JsonApiView):
    """Check whether a teacher is free for a class slot (?class=<id>)."""

    def get(self, request: HttpRequest, public_id) -> JsonResponse:
        teacher = get_by_public_id(Teacher, public_id, TEACHER_NOT_FOUND)
        class_id = request.GET.get('class')
        if not class_id:
            raise ValidationFailedException("Thiếu tham số lớp học (class).")
        course_class = get_by_public_id(
            CourseClass.objects.select_related('semester'), class_id, "Không tìm thấy lớp học."
        )
        conflicts = find_teacher_conflicts(teacher, course_class)
        return json_success({
            'available': not conflicts,
            'conflicts': conflict_details(conflicts),
        })


# =====================================================================
# TEACHING ASSIGNMENTS
# =====================================================================

class AvailabilityCheckedMixin:
    """Refuses saves that would double-book the teacher."""

    def save_form(self, form: forms.ModelForm):
        assignment = form.instance
        if assignment.pk is None or {'teacher', 'course_class'} & set(form.changed_data):
            check_teacher_available(assignment.teacher, assignment.course_class, assignment)
        if assignment.pk is not None:
            assignment.version += 1
        return super().save_form(form)


class TeachingAssignmentListView(AvailabilityCheckedMixin, ModelListView):
    model = TeachingAssignment
    form_class = TeachingAssignmentForm
    serializer = serialize_assignment
    filter_map = {
        'teacher': 'teacher__public_id',
        'class': 'course_class__public_id',
        'semester': 'semester__public_id',
        'academic_year': 'academic_year__public_id',
        'status': 'status',
        'assignment_type': 'assignment_type',
        'is_active': 'is_active',
    }
    search_fields = ('code', 'teacher__full_name', 'course_class__code')
    created_message = "Tạo phân công giảng dạy thành công."

    def get_queryset(self):
        return TeachingAssignment.objects.select_related(
            'teacher', 'course_class', 'semester', 'academic_year', 'approved_by'
        )


class TeachingAssignmentDetailView(AvailabilityCheckedMixin, ModelDetailView):
    model = TeachingAssignment
    form_class = TeachingAssignmentForm
    serializer = serialize_assignment
    delete_guard = ensure_assignment_deletable
    not_found_message = ASSIGNMENT_NOT_FOUND


class AssignmentWorkflowView(JsonApiView):
    """Base for POST-only workflow actions on one assignment."""

    success_message = "Cập nhật trạng thái thành công."

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        payload = self.get_payload()
        with transaction.atomic():
            assignment = get_by_public_id(
                TeachingAssignment.objects.select_for_update(), public_id, ASSIGNMENT_NOT_FOUND
            )
            assignment = self.act(assignment, payload)
        return json_success(serialize_assignment(assignment), message=self.success_message)

    def act(self, assignment: TeachingAssignment, payload: dict) -> TeachingAssignment:
        raise NotImplementedError


class AssignmentApproveView(AssignmentWorkflowView):
    success_message = "Phê duyệt phân công giảng dạy thành công."

    def act(self, assignment, payload):
        return approve_assignment(assignment, self.acting_user, payload.get('notes', ''))


class AssignmentTransitionView(AssignmentWorkflowView):

    def act(self, assignment, payload):
        target = payload.get('status')
        if not target:
            raise ValidationFailedException(
                "Thiếu trạng thái đích (status).",
                details={'valid_transitions': get_valid_transitions(assignment.status)}
            )
        return perform_transition(assignment, target, self.acting_user)


class AssignmentCancelView(AssignmentWorkflowView):
    success_message = "Hủy phân công giảng dạy thành công."

    def act(self, assignment, payload):
        return cancel_assignment(assignment, payload.get('reason', ''), self.acting_user)
