"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Teacher and TeachingAssignment models. A teaching
             assignment binds one teacher to one class with workload,
             compensation and performance figures.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin


def full_years_between(start: Optional[date], end: date) -> int:
    """Whole years elapsed, counting a year as 365.25 days."""
    if start is None or end < start:
        return 0
    return int((end - start).days // Decimal('365.25'))


class Position(models.TextChoices):
    """Academic positions. Each maps to a salary position coefficient."""
    DEPARTMENT_HEAD = 'department_head', _('Head of Department')
    DEPUTY_HEAD = 'deputy_head', _('Deputy Head of Department')
    SECTION_HEAD = 'section_head', _('Head of Section')
    SENIOR_LECTURER = 'senior_lecturer', _('Senior Lecturer')
    LECTURER = 'lecturer', _('Lecturer')
    ASSISTANT = 'assistant', _('Teaching Assistant')


class Gender(models.TextChoices):
    MALE = 'male', _('Male')
    FEMALE = 'female', _('Female')
    OTHER = 'other', _('Other')


class AssignmentType(models.TextChoices):
    PRIMARY = 'primary', _('Primary Lecturer')
    SUPPORT = 'support', _('Support')
    SUBSTITUTE = 'substitute', _('Substitute')
    ADDITIONAL = 'additional', _('Additional')


class AssignmentStatus(models.TextChoices):
    """
    Workflow for teaching assignments.

    draft -> assigned -> confirmed -> in_progress -> completed,
    with cancelled reachable from any non-terminal state.
    """
    DRAFT = 'draft', _('Draft')
    ASSIGNED = 'assigned', _('Assigned')
    CONFIRMED = 'confirmed', _('Confirmed')
    IN_PROGRESS = 'in_progress', _('In Progress')
    COMPLETED = 'completed', _('Completed')
    CANCELLED = 'cancelled', _('Cancelled')


# Statuses that count as real teaching for payroll
PAYABLE_ASSIGNMENT_STATUSES = [
    AssignmentStatus.CONFIRMED,
    AssignmentStatus.IN_PROGRESS,
    AssignmentStatus.COMPLETED,
]


class Teacher(AuditLogMixin, StatusMixin):
    """
    A member of the teaching staff.

    Years of service and age are derived from the stored dates on every
    read and never persisted.
    """

    code = models.CharField(max_length=20, unique=True, verbose_name=_('Teacher Code'))
    full_name = models.CharField(max_length=200, verbose_name=_('Full Name'))
    email = models.EmailField(unique=True, verbose_name=_('Email'))
    phone = models.CharField(max_length=20, blank=True, verbose_name=_('Phone'))
    department = models.ForeignKey(
        'academics.Department',
        on_delete=models.PROTECT,
        related_name='teachers',
        verbose_name=_('Department')
    )
    degree = models.ForeignKey(
        'academics.Degree',
        on_delete=models.PROTECT,
        related_name='teachers',
        verbose_name=_('Degree')
    )
    position = models.CharField(
        max_length=20,
        choices=Position.choices,
        default=Position.LECTURER,
        verbose_name=_('Position')
    )
    hire_date = models.DateField(verbose_name=_('Hire Date'))
    birth_date = models.DateField(null=True, blank=True, verbose_name=_('Date of Birth'))
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True, verbose_name=_('Gender'))
    address = models.CharField(max_length=255, blank=True, verbose_name=_('Address'))
    identity_number = models.CharField(max_length=20, blank=True, verbose_name=_('Identity Number'))
    performance_rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))],
        verbose_name=_('Performance Rating'),
        help_text=_('0-5. Leave empty when not evaluated.')
    )
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Teacher')
        verbose_name_plural = _('Teachers')
        ordering = ['full_name']

    def __str__(self) -> str:
        return f"{self.code} - {self.full_name}"

    def clean(self) -> None:
        today = timezone.localdate()
        if self.hire_date and self.hire_date > today:
            raise ValidationError({'hire_date': _('Ngày vào làm không được ở tương lai.')})
        if self.birth_date and self.hire_date and self.birth_date >= self.hire_date:
            raise ValidationError({'birth_date': _('Ngày sinh phải trước ngày vào làm.')})

    def save(self, *args, **kwargs) -> None:
        self.code = self.code.strip().upper()
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def years_of_service_on(self, as_of: Optional[date] = None) -> int:
        return full_years_between(self.hire_date, as_of or timezone.localdate())

    @property
    def years_of_service(self) -> int:
        return self.years_of_service_on()

    @property
    def age(self) -> Optional[int]:
        if not self.birth_date:
            return None
        today = timezone.localdate()
        had_birthday = (today.month, today.day) >= (self.birth_date.month, self.birth_date.day)
        return today.year - self.birth_date.year - (0 if had_birthday else 1)


class TeachingAssignment(AuditLogMixin, StatusMixin):
    """
    One teacher bound to one class for a semester.

    Semester and academic year always follow the class. The compensation
    block holds pre-computed override values; salary calculations take a
    snapshot of teaching_hours and additional_hours at creation time.
    """

    code = models.CharField(
        max_length=60,
        unique=True,
        blank=True,
        verbose_name=_('Assignment Code'),
        help_text=_('Generated as <teacher>_<class>_<n> when blank.')
    )
    teacher = models.ForeignKey(
        Teacher,
        on_delete=models.PROTECT,
        related_name='teaching_assignments',
        verbose_name=_('Teacher')
    )
    course_class = models.ForeignKey(
        'academics.CourseClass',
        on_delete=models.PROTECT,
        related_name='teaching_assignments',
        verbose_name=_('Class')
    )
    semester = models.ForeignKey(
        'academics.Semester',
        on_delete=models.PROTECT,
        related_name='teaching_assignments',
        verbose_name=_('Semester')
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        on_delete=models.PROTECT,
        related_name='teaching_assignments',
        verbose_name=_('Academic Year')
    )
    assignment_type = models.CharField(
        max_length=15,
        choices=AssignmentType.choices,
        default=AssignmentType.PRIMARY,
        verbose_name=_('Assignment Type')
    )
    teaching_hours = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('200'))],
        verbose_name=_('Teaching Hours')
    )
    teaching_coefficient = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(Decimal('0.1')), MaxValueValidator(Decimal('3.0'))],
        verbose_name=_('Teaching Coefficient')
    )

    # Workload distribution
    lecture_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0'),
                                        validators=[MinValueValidator(Decimal('0'))],
                                        verbose_name=_('Lecture Hours'))
    practice_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0'),
                                         validators=[MinValueValidator(Decimal('0'))],
                                         verbose_name=_('Practice Hours'))
    lab_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0'),
                                    validators=[MinValueValidator(Decimal('0'))],
                                    verbose_name=_('Lab Hours'))
    other_hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0'),
                                      validators=[MinValueValidator(Decimal('0'))],
                                      verbose_name=_('Other Hours'))
    additional_hours = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Additional (Overtime) Hours')
    )

    status = models.CharField(
        max_length=15,
        choices=AssignmentStatus.choices,
        default=AssignmentStatus.ASSIGNED,
        verbose_name=_('Status')
    )

    # Approval
    is_approved = models.BooleanField(default=False, verbose_name=_('Approved'))
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_teaching_assignments',
        verbose_name=_('Approved By')
    )
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Approved At'))
    approval_notes = models.TextField(blank=True, verbose_name=_('Approval Notes'))

    # Schedule
    schedule_start_date = models.DateField(null=True, blank=True, verbose_name=_('Start Date'))
    schedule_end_date = models.DateField(null=True, blank=True, verbose_name=_('End Date'))
    actual_start_date = models.DateField(null=True, blank=True, verbose_name=_('Actual Start'))
    actual_end_date = models.DateField(null=True, blank=True, verbose_name=_('Actual End'))

    # Compensation overrides
    base_rate = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0'),
                                    validators=[MinValueValidator(Decimal('0'))],
                                    verbose_name=_('Base Rate'))
    additional_rate = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0'),
                                          validators=[MinValueValidator(Decimal('0'))],
                                          verbose_name=_('Additional Rate'))
    overtime_rate = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0'),
                                        validators=[MinValueValidator(Decimal('0'))],
                                        verbose_name=_('Overtime Rate'))

    # Performance
    attendance_rate = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        verbose_name=_('Attendance Rate (%)')
    )
    student_feedback = models.DecimalField(
        max_digits=3, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))],
        verbose_name=_('Student Feedback')
    )
    completion_rate = models.DecimalField(
        max_digits=5, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        verbose_name=_('Completion Rate (%)')
    )

    version = models.PositiveIntegerField(default=1, verbose_name=_('Version'))
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Teaching Assignment')
        verbose_name_plural = _('Teaching Assignments')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['teacher', 'semester', 'status']),
        ]

    def __str__(self) -> str:
        return self.code or f"{self.teacher_id}_{self.course_class_id}"

    def clean(self) -> None:
        errors = {}
        if self.schedule_start_date and self.schedule_end_date:
            if self.schedule_end_date <= self.schedule_start_date:
                errors['schedule_end_date'] = _('Ngày kết thúc phải sau ngày bắt đầu.')
        if self.actual_start_date and self.actual_end_date:
            if self.actual_end_date < self.actual_start_date:
                errors['actual_end_date'] = _('Ngày kết thúc thực tế phải sau ngày bắt đầu thực tế.')
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs) -> None:
        if self.course_class_id:
            self.semester_id = self.course_class.semester_id
            self.academic_year_id = self.course_class.semester.academic_year_id
        if not self.code:
            self.code = self._next_code()
        super().save(*args, **kwargs)

    def _next_code(self) -> str:
        prefix = f"{self.teacher.code}_{self.course_class.code}"
        existing = TeachingAssignment.objects.filter(code__startswith=prefix).count()
        return f"{prefix}_{existing + 1}"

    @property
    def total_workload_hours(self) -> Decimal:
        return self.teaching_hours + self.additional_hours

    @property
    def estimated_compensation(self) -> Decimal:
        return (
            self.teaching_hours * self.base_rate * self.teaching_coefficient
            + self.additional_rate
            + self.overtime_rate
        )

    @property
    def assignment_duration(self) -> Optional[int]:
        """Length of the planned schedule in days."""
        if not (self.schedule_start_date and self.schedule_end_date):
            return None
        return (self.schedule_end_date - self.schedule_start_date).days
