"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: JSON endpoints for rate settings, period rates and salary
             calculations.
-------------------------------------------------------------------------
"""
from django import forms
from django.db import transaction
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.dateparse import parse_date

from apps.academics.models import AcademicYear, Department, Semester
from apps.core.exceptions import ValidationFailedException, VersionConflictException
from apps.core.services import get_by_public_id
from apps.core.views import (
    JsonApiView, ModelDetailView, ModelListView, form_error_details, json_success, paginate,
)
from apps.payroll.exports import salary_workbook_response
from apps.payroll.forms import (
    PeriodRateForm, RatePreviewForm, RateSettingForm, SalaryCalculationCreateForm,
    SalaryCalculationUpdateForm,
)
from apps.payroll.models import PeriodRate, PeriodType, RateSetting, RateType, SalaryCalculation
from apps.payroll.serializers import (
    plain_numbers, serialize_period_rate, serialize_rate_setting, serialize_salary,
    serialize_salary_summary,
)
from apps.payroll.services_rates import (
    activate_period_rate, activate_rate_setting, approve_period_rate, approve_rate_setting,
    deactivate_period_rate, deactivate_rate_setting, ensure_rate_setting_deletable,
    ensure_rate_setting_editable, get_active_rate, get_current_period_rate,
    period_rate_statistics, preview_rate, submit_rate_setting, supersede_rate_setting,
)
from apps.payroll.services_salary import (
    approve_salary, archive_salary_calculation, batch_calculate,
    calculate_salary, calculations_for_period, calculations_for_teacher,
    create_salary_calculation, department_summary, mark_salary_paid, salary_statistics,
    update_salary_calculation,
)
from apps.teaching.models import Teacher

RATE_NOT_FOUND = "Không tìm thấy cấu hình mức lương."
PERIOD_RATE_NOT_FOUND = "Không tìm thấy mức lương theo tiết."
SALARY_NOT_FOUND = "Không tìm thấy bản tính lương."
TEACHER_NOT_FOUND = "Không tìm thấy giảng viên."
YEAR_NOT_FOUND = "Không tìm thấy năm học."
SEMESTER_NOT_FOUND = "Không tìm thấy học kỳ."


def validated(form: forms.Form) -> forms.Form:
    if not form.is_valid():
        raise ValidationFailedException(
            "Dữ liệu không hợp lệ.",
            details={'fields': form_error_details(form)}
        )
    return form


class CalendarFilterMixin:
    """Resolves optional ?academic_year= / ?semester= / ?department= ids."""

    def optional_lookup(self, param: str, model, message: str):
        value = self.request.GET.get(param)
        if not value:
            return None
        return get_by_public_id(model, value, message)

    def calendar_filters(self):
        return (
            self.optional_lookup('academic_year', AcademicYear, YEAR_NOT_FOUND),
            self.optional_lookup('semester', Semester, SEMESTER_NOT_FOUND),
        )


# =====================================================================
# RATE SETTINGS
# =====================================================================

class RateSettingListView(ModelListView):
    model = RateSetting
    form_class = RateSettingForm
    serializer = serialize_rate_setting
    filter_map = {
        'rate_type': 'rate_type',
        'applicable_scope': 'applicable_scope',
        'status': 'status',
        'category': 'category',
        'academic_year': 'academic_year__public_id',
        'semester': 'semester__public_id',
        'is_active': 'is_active',
    }
    search_fields = ('code', 'name', 'description')
    created_message = "Tạo cấu hình mức lương thành công."

    def get_queryset(self):
        return RateSetting.objects.select_related(
            'academic_year', 'semester', 'approved_by', 'supersedes', 'superseded_by'
        )


class RateSettingDetailView(ModelDetailView):
    model = RateSetting
    form_class = RateSettingForm
    serializer = serialize_rate_setting
    delete_guard = ensure_rate_setting_deletable
    not_found_message = RATE_NOT_FOUND

    def check_updatable(self, instance) -> None:
        ensure_rate_setting_editable(instance)
        sent_version = self.get_payload().get('version')
        if sent_version is not None and str(sent_version) != str(instance.version):
            raise VersionConflictException(
                details={'current_version': instance.version, 'sent_version': sent_version}
            )

    def perform_update(self, form: forms.ModelForm):
        form.instance.version += 1
        return self.save_form(form)


class ActiveRateView(CalendarFilterMixin, JsonApiView):
    """Highest-priority effective active rate of one type."""

    def get(self, request: HttpRequest, rate_type: str) -> JsonResponse:
        if rate_type not in RateType.values:
            raise ValidationFailedException(
                "Loại mức lương không hợp lệ.",
                details={'valid_types': RateType.values}
            )
        academic_year, semester = self.calendar_filters()
        return json_success(serialize_rate_setting(get_active_rate(rate_type, academic_year, semester)))


class RatePreviewView(JsonApiView):
    """Evaluate a rate for given hours and experience without saving."""

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        rate = get_by_public_id(RateSetting, public_id, RATE_NOT_FOUND)
        form = validated(RatePreviewForm(data=self.get_payload()))
        result = preview_rate(rate, form.cleaned_data['hours'], form.cleaned_data['experience_years'])
        return json_success(plain_numbers(result))


class RateSettingWorkflowView(JsonApiView):
    """Base for POST-only lifecycle actions on one rate setting."""

    success_message = "Cập nhật trạng thái thành công."

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        payload = self.get_payload()
        with transaction.atomic():
            rate = get_by_public_id(RateSetting.objects.select_for_update(), public_id, RATE_NOT_FOUND)
            result = self.act(rate, payload)
        return json_success(serialize_rate_setting(result), message=self.success_message)

    def act(self, rate: RateSetting, payload: dict) -> RateSetting:
        raise NotImplementedError


class RateSettingSubmitView(RateSettingWorkflowView):
    success_message = "Đã gửi cấu hình mức lương chờ phê duyệt."

    def act(self, rate, payload):
        return submit_rate_setting(rate, self.acting_user)


class RateSettingApproveView(RateSettingWorkflowView):
    success_message = "Phê duyệt cấu hình mức lương thành công."

    def act(self, rate, payload):
        return approve_rate_setting(rate, self.acting_user, payload.get('notes', ''))


class RateSettingActivateView(RateSettingWorkflowView):
    success_message = "Kích hoạt cấu hình mức lương thành công."

    def act(self, rate, payload):
        return activate_rate_setting(rate, self.acting_user)


class RateSettingDeactivateView(RateSettingWorkflowView):
    success_message = "Ngừng áp dụng cấu hình mức lương thành công."

    def act(self, rate, payload):
        return deactivate_rate_setting(rate, self.acting_user)


class RateSettingSupersedeView(RateSettingWorkflowView):
    """Returns the new draft version; the payload may override copied fields."""

    success_message = "Đã tạo phiên bản mới của cấu hình mức lương."

    def act(self, rate, payload):
        changes = payload.get('changes') or {}
        if changes:
            form = RateSettingForm(instance=rate)
            changes = {
                name: form.fields[name].clean(value)
                for name, value in changes.items()
                if name in form.fields
            }
        return supersede_rate_setting(rate, self.acting_user, changes)


# =====================================================================
# PERIOD RATES
# =====================================================================

class PeriodRateActivationMixin:
    """Saving an active period rate retires the other rates of its year."""

    def save_form(self, form: forms.ModelForm):
        period_rate = super().save_form(form)
        if period_rate.is_active:
            activate_period_rate(period_rate, self.acting_user)
        return period_rate


class PeriodRateListView(PeriodRateActivationMixin, ModelListView):
    model = PeriodRate
    form_class = PeriodRateForm
    serializer = serialize_period_rate
    filter_map = {
        'academic_year': 'academic_year__public_id',
        'approval_status': 'approval_status',
        'is_active': 'is_active',
    }
    search_fields = ('name',)
    created_message = "Tạo mức lương theo tiết thành công."

    def get_queryset(self):
        return PeriodRate.objects.select_related('academic_year', 'approved_by')


class PeriodRateDetailView(PeriodRateActivationMixin, ModelDetailView):
    model = PeriodRate
    form_class = PeriodRateForm
    serializer = serialize_period_rate
    not_found_message = PERIOD_RATE_NOT_FOUND


class PeriodRateCurrentView(JsonApiView):
    """Current period rate of an academic year (?academic_year=<id>)."""

    def get(self, request: HttpRequest) -> JsonResponse:
        year_id = request.GET.get('academic_year')
        if not year_id:
            raise ValidationFailedException("Thiếu tham số năm học (academic_year).")
        academic_year = get_by_public_id(AcademicYear, year_id, YEAR_NOT_FOUND)
        return json_success(serialize_period_rate(get_current_period_rate(academic_year)))


class PeriodRateApproveView(JsonApiView):

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        with transaction.atomic():
            period_rate = get_by_public_id(
                PeriodRate.objects.select_for_update(), public_id, PERIOD_RATE_NOT_FOUND
            )
            period_rate = approve_period_rate(period_rate, self.acting_user)
        return json_success(serialize_period_rate(period_rate), message="Phê duyệt mức lương theo tiết thành công.")


class PeriodRateActivateView(JsonApiView):

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        period_rate = get_by_public_id(PeriodRate, public_id, PERIOD_RATE_NOT_FOUND)
        period_rate = activate_period_rate(period_rate, self.acting_user)
        return json_success(serialize_period_rate(period_rate), message="Kích hoạt mức lương theo tiết thành công.")


class PeriodRateDeactivateView(JsonApiView):

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        with transaction.atomic():
            period_rate = get_by_public_id(
                PeriodRate.objects.select_for_update(), public_id, PERIOD_RATE_NOT_FOUND
            )
            period_rate = deactivate_period_rate(period_rate, self.acting_user)
        return json_success(serialize_period_rate(period_rate), message="Ngừng áp dụng mức lương theo tiết thành công.")


class PeriodRateStatisticsView(JsonApiView):
    """Counts and amounts of the period rates of one academic year (?academic_year=<id>)."""

    def get(self, request: HttpRequest) -> JsonResponse:
        year_id = request.GET.get('academic_year')
        if not year_id:
            raise ValidationFailedException("Thiếu tham số năm học (academic_year).")
        academic_year = get_by_public_id(AcademicYear, year_id, YEAR_NOT_FOUND)
        return json_success(plain_numbers(period_rate_statistics(academic_year)))


# =====================================================================
# SALARY CALCULATIONS
# =====================================================================

SALARY_FILTERS = {
    'teacher': 'teacher__public_id',
    'academic_year': 'academic_year__public_id',
    'semester': 'semester__public_id',
    'status': 'status',
    'period_type': 'period_type',
    'department': 'teacher__department__public_id',
    'is_active': 'is_active',
}


class SalaryQuerysetMixin:
    """Archived calculations are hidden unless ?is_active= is given."""

    def get_queryset(self):
        queryset = SalaryCalculation.objects.select_related(
            'teacher', 'teacher__department', 'academic_year', 'semester'
        )
        if 'is_active' not in self.request.GET:
            queryset = queryset.filter(is_active=True)
        return queryset


class SalaryListView(SalaryQuerysetMixin, ModelListView):
    """
    GET lists calculations; POST creates a calculation shell from
    teacher_id, academic_year_id, semester_id, the period block and an
    optional assignment_ids list.
    """

    model = SalaryCalculation
    serializer = serialize_salary_summary
    filter_map = SALARY_FILTERS
    search_fields = ('calculation_code', 'teacher__code', 'teacher__full_name')

    def post(self, request: HttpRequest, *args, **kwargs) -> JsonResponse:
        payload = self.get_payload()
        form = validated(SalaryCalculationCreateForm(data=payload))

        missing = [name for name in ('teacher_id', 'academic_year_id', 'semester_id') if not payload.get(name)]
        if missing:
            raise ValidationFailedException(
                "Thiếu thông tin bắt buộc.",
                details={'fields': {name: ["Trường này là bắt buộc."] for name in missing}}
            )

        assignment_ids = payload.get('assignment_ids') or None
        if assignment_ids is not None and not isinstance(assignment_ids, list):
            raise ValidationFailedException("Danh sách phân công (assignment_ids) phải là một mảng.")

        teacher = get_by_public_id(Teacher, payload['teacher_id'], TEACHER_NOT_FOUND)
        academic_year = get_by_public_id(AcademicYear, payload['academic_year_id'], YEAR_NOT_FOUND)
        semester = get_by_public_id(Semester, payload['semester_id'], SEMESTER_NOT_FOUND)

        calculation = create_salary_calculation(
            teacher=teacher,
            academic_year=academic_year,
            semester=semester,
            assignment_ids=assignment_ids,
            user=self.acting_user,
            **form.cleaned_data
        )
        return json_success(serialize_salary(calculation), message="Tạo bản tính lương thành công.", status=201)


class SalaryDetailView(ModelDetailView):
    """
    PUT edits deductions, notes, warnings, method and month only.
    DELETE archives the calculation instead of removing it.
    """

    model = SalaryCalculation
    serializer = serialize_salary
    not_found_message = SALARY_NOT_FOUND
    deleted_message = "Đã lưu trữ bản tính lương."

    def put(self, request: HttpRequest, public_id) -> JsonResponse:
        payload = self.get_payload()
        form = validated(SalaryCalculationUpdateForm(data=payload))
        with transaction.atomic():
            calculation = get_by_public_id(
                SalaryCalculation.objects.select_for_update(), public_id, SALARY_NOT_FOUND
            )
            calculation = update_salary_calculation(
                calculation,
                form.changed_values(payload),
                self.acting_user,
                expected_version=form.cleaned_data.get('version'),
            )
        return json_success(serialize_salary(calculation), message=self.updated_message)

    patch = put

    def perform_delete(self, instance) -> None:
        archive_salary_calculation(instance, self.acting_user)


class SalaryCalculateView(JsonApiView):
    """
    Runs the calculator. Not wrapped in a request transaction so the
    failure bookkeeping write survives a failed run.
    """

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        calculation = get_by_public_id(SalaryCalculation, public_id, SALARY_NOT_FOUND)
        calculation = calculate_salary(calculation, self.acting_user)
        return json_success(serialize_salary(calculation), message="Tính lương thành công.")


class SalaryWorkflowView(JsonApiView):
    """Base for approve / mark-paid."""

    success_message = "Cập nhật trạng thái thành công."

    def post(self, request: HttpRequest, public_id) -> JsonResponse:
        payload = self.get_payload()
        with transaction.atomic():
            calculation = get_by_public_id(
                SalaryCalculation.objects.select_for_update(), public_id, SALARY_NOT_FOUND
            )
            calculation = self.act(calculation, payload.get('notes', ''))
        return json_success(serialize_salary(calculation), message=self.success_message)

    def act(self, calculation: SalaryCalculation, notes: str) -> SalaryCalculation:
        raise NotImplementedError


class SalaryApproveView(SalaryWorkflowView):
    success_message = "Phê duyệt lương thành công."

    def act(self, calculation, notes):
        return approve_salary(calculation, self.acting_user, notes)


class SalaryMarkPaidView(SalaryWorkflowView):
    success_message = "Đã đánh dấu thanh toán lương."

    def act(self, calculation, notes):
        return mark_salary_paid(calculation, self.acting_user, notes)


class SalaryBatchCalculateView(JsonApiView):
    """Calculate many records; answers 200 with per-item results."""

    def post(self, request: HttpRequest) -> JsonResponse:
        ids = self.get_payload().get('ids')
        if not isinstance(ids, list) or not ids:
            raise ValidationFailedException("Danh sách bản tính lương (ids) không được để trống.")
        result = batch_calculate(ids, self.acting_user)
        message = f"Tính lương thành công {len(result['succeeded'])}/{result['total']} bản."
        return json_success(plain_numbers(result), message=message)


class SalaryStatisticsView(CalendarFilterMixin, JsonApiView):
    """Totals and status breakdown; ?group_by=department adds the rollup."""

    def get(self, request: HttpRequest) -> JsonResponse:
        academic_year, semester = self.calendar_filters()
        department = self.optional_lookup('department', Department, "Không tìm thấy khoa.")
        stats = salary_statistics(
            academic_year, semester, department,
            include_departments=request.GET.get('group_by') == 'department',
        )
        return json_success(plain_numbers(stats))


class SalaryDepartmentSummaryView(CalendarFilterMixin, JsonApiView):

    def get(self, request: HttpRequest) -> JsonResponse:
        academic_year, semester = self.calendar_filters()
        return json_success(plain_numbers(department_summary(academic_year, semester)))


class SalaryByTeacherView(CalendarFilterMixin, JsonApiView):

    def get(self, request: HttpRequest, teacher_id) -> JsonResponse:
        teacher = get_by_public_id(Teacher, teacher_id, TEACHER_NOT_FOUND)
        academic_year = self.optional_lookup('academic_year', AcademicYear, YEAR_NOT_FOUND)
        items, pagination = paginate(
            request, calculations_for_teacher(teacher, academic_year), serialize_salary_summary
        )
        return json_success(items, pagination=pagination)


class SalaryByPeriodView(JsonApiView):
    """Calculations of ?period_type= within ?start_date= .. ?end_date=."""

    def get(self, request: HttpRequest) -> JsonResponse:
        period_type = request.GET.get('period_type')
        start = parse_date(request.GET.get('start_date') or '')
        end = parse_date(request.GET.get('end_date') or '')
        errors = {}
        if period_type not in PeriodType.values:
            errors['period_type'] = ["Loại kỳ tính lương không hợp lệ."]
        if start is None:
            errors['start_date'] = ["Ngày bắt đầu không hợp lệ."]
        if end is None:
            errors['end_date'] = ["Ngày kết thúc không hợp lệ."]
        if errors:
            raise ValidationFailedException("Dữ liệu không hợp lệ.", details={'fields': errors})

        items, pagination = paginate(
            request, calculations_for_period(period_type, start, end), serialize_salary_summary
        )
        return json_success(items, pagination=pagination)


class SalaryExportView(SalaryQuerysetMixin, ModelListView):
    """Excel workbook of the calculations matching the list filters."""

    model = SalaryCalculation
    filter_map = SALARY_FILTERS
    search_fields = SalaryListView.search_fields
    http_method_names = ['get']

    def get(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        queryset = self.filter_queryset(self.get_queryset()).order_by('teacher__code', 'period_start')
        return salary_workbook_response(queryset)

