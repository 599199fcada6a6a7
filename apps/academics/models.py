"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Reference data models for the academic calendar and the
             course catalogue: AcademicYear, Semester, Department,
             Degree, Subject and CourseClass.
-------------------------------------------------------------------------
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin


class AcademicYearStatus(models.TextChoices):
    """Lifecycle of an academic year."""
    PLANNING = 'planning', _('Planning')
    ACTIVE = 'active', _('Active')
    COMPLETED = 'completed', _('Completed')
    ARCHIVED = 'archived', _('Archived')


class SemesterType(models.TextChoices):
    REGULAR = 'regular', _('Regular')
    SUMMER = 'summer', _('Summer')
    SPECIAL = 'special', _('Special')


class SemesterStatus(models.TextChoices):
    """Lifecycle of a semester."""
    PLANNING = 'planning', _('Planning')
    REGISTRATION = 'registration', _('Registration')
    ACTIVE = 'active', _('Active')
    EXAM = 'exam', _('Examinations')
    COMPLETED = 'completed', _('Completed')
    ARCHIVED = 'archived', _('Archived')


class SubjectType(models.TextChoices):
    GENERAL = 'general', _('General Education')
    MAJOR = 'major', _('Major')
    SPECIALIZATION = 'specialization', _('Specialization')
    ELECTIVE = 'elective', _('Elective')
    INTERNSHIP = 'internship', _('Internship')


class SubjectLevel(models.TextChoices):
    UNDERGRADUATE = 'undergraduate', _('Undergraduate')
    GRADUATE = 'graduate', _('Graduate')
    POSTGRADUATE = 'postgraduate', _('Postgraduate')


class ClassStatus(models.TextChoices):
    """Lifecycle of a class offering."""
    PLANNING = 'planning', _('Planning')
    OPEN = 'open', _('Open for Enrolment')
    FULL = 'full', _('Full')
    IN_PROGRESS = 'in_progress', _('In Progress')
    COMPLETED = 'completed', _('Completed')
    CANCELLED = 'cancelled', _('Cancelled')


class ClassType(models.TextChoices):
    THEORY = 'theory', _('Theory')
    PRACTICE = 'practice', _('Practice')
    LAB = 'lab', _('Laboratory')
    SEMINAR = 'seminar', _('Seminar')
    ONLINE = 'online', _('Online')


class TeachingMethod(models.TextChoices):
    OFFLINE = 'offline', _('Offline')
    ONLINE = 'online', _('Online')
    HYBRID = 'hybrid', _('Hybrid')


class AcademicYear(AuditLogMixin, StatusMixin):
    """
    Top level of the academic calendar.

    Attributes:
        code: "YYYY-YYYY", generated from start_year when left blank.
        start_year / end_year: end_year is always start_year + 1.
        start_date / end_date: Calendar boundaries of the year.
    """

    code = models.CharField(
        max_length=9,
        unique=True,
        blank=True,
        verbose_name=_('Code'),
        help_text=_('Academic year code in the form YYYY-YYYY.')
    )
    name = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Name')
    )
    start_year = models.PositiveIntegerField(
        validators=[MinValueValidator(2000), MaxValueValidator(2100)],
        verbose_name=_('Start Year')
    )
    end_year = models.PositiveIntegerField(
        blank=True,
        validators=[MinValueValidator(2001), MaxValueValidator(2101)],
        verbose_name=_('End Year')
    )
    start_date = models.DateField(verbose_name=_('Start Date'))
    end_date = models.DateField(verbose_name=_('End Date'))
    status = models.CharField(
        max_length=15,
        choices=AcademicYearStatus.choices,
        default=AcademicYearStatus.PLANNING,
        verbose_name=_('Status')
    )
    description = models.TextField(blank=True, verbose_name=_('Description'))

    class Meta:
        verbose_name = _('Academic Year')
        verbose_name_plural = _('Academic Years')
        ordering = ['-start_year']

    def __str__(self) -> str:
        return self.code or f"{self.start_year}-{self.end_year}"

    def clean(self) -> None:
        """Validate year arithmetic, date order and overlap with other years."""
        if self.start_year and not self.end_year:
            self.end_year = self.start_year + 1
        errors = {}
        if self.start_year and self.end_year and self.end_year != self.start_year + 1:
            errors['end_year'] = _('Năm kết thúc phải bằng năm bắt đầu cộng 1.')
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            errors['end_date'] = _('Ngày kết thúc phải sau ngày bắt đầu.')
        if self.code and self.start_year and self.end_year:
            if self.code != f"{self.start_year}-{self.end_year}":
                errors['code'] = _('Mã năm học phải có dạng YYYY-YYYY khớp với năm bắt đầu và kết thúc.')
        if errors:
            raise ValidationError(errors)

        if self.is_active and self.start_date and self.end_date:
            overlapping = AcademicYear.objects.filter(
                is_active=True,
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            ).exclude(pk=self.pk)
            if overlapping.exists():
                raise ValidationError(_('Thời gian năm học bị trùng với năm học khác.'))

    def save(self, *args, **kwargs) -> None:
        if self.start_year and not self.end_year:
            self.end_year = self.start_year + 1
        if not self.code:
            self.code = f"{self.start_year}-{self.end_year}"
        if not self.name:
            self.name = f"Năm học {self.start_year}-{self.end_year}"
        super().save(*args, **kwargs)

    @property
    def is_current(self) -> bool:
        today = timezone.localdate()
        return self.start_date <= today <= self.end_date

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days


class Semester(AuditLogMixin, StatusMixin):
    """
    Second level of the academic calendar.

    Semester 3 of a year is the summer term. Dates must sit inside the
    parent academic year and may not overlap another semester of it.
    """

    academic_year = models.ForeignKey(
        AcademicYear,
        on_delete=models.PROTECT,
        related_name='semesters',
        verbose_name=_('Academic Year')
    )
    semester_number = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(3)],
        verbose_name=_('Semester Number')
    )
    semester_type = models.CharField(
        max_length=10,
        choices=SemesterType.choices,
        default=SemesterType.REGULAR,
        verbose_name=_('Semester Type')
    )
    code = models.CharField(
        max_length=20,
        unique=True,
        blank=True,
        verbose_name=_('Code'),
        help_text=_('Generated as <academic year code>.<number> when blank.')
    )
    name = models.CharField(max_length=100, blank=True, verbose_name=_('Name'))
    start_date = models.DateField(verbose_name=_('Start Date'))
    end_date = models.DateField(verbose_name=_('End Date'))
    registration_start_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Registration Opens')
    )
    registration_end_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Registration Closes')
    )
    status = models.CharField(
        max_length=15,
        choices=SemesterStatus.choices,
        default=SemesterStatus.PLANNING,
        verbose_name=_('Status')
    )
    max_credits = models.PositiveSmallIntegerField(
        default=24,
        validators=[MinValueValidator(1), MaxValueValidator(40)],
        verbose_name=_('Max Credits')
    )
    description = models.TextField(blank=True, verbose_name=_('Description'))

    class Meta:
        verbose_name = _('Semester')
        verbose_name_plural = _('Semesters')
        ordering = ['-academic_year__start_year', 'semester_number']
        constraints = [
            models.UniqueConstraint(
                fields=['academic_year', 'semester_number'],
                name='unique_semester_number_per_year'
            ),
        ]

    def __str__(self) -> str:
        return self.name or self.code

    def clean(self) -> None:
        errors = {}
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            errors['end_date'] = _('Ngày kết thúc phải sau ngày bắt đầu.')

        if self.registration_start_date and self.registration_end_date:
            if self.registration_end_date <= self.registration_start_date:
                errors['registration_end_date'] = _('Ngày kết thúc đăng ký phải sau ngày bắt đầu đăng ký.')
            elif self.start_date and self.registration_end_date > self.start_date:
                errors['registration_end_date'] = _('Thời gian đăng ký phải kết thúc trước khi học kỳ bắt đầu.')

        year = self.academic_year if self.academic_year_id else None
        if year and self.start_date and self.end_date:
            if self.start_date < year.start_date or self.end_date > year.end_date:
                errors['start_date'] = _('Thời gian học kỳ phải nằm trong năm học.')
        if errors:
            raise ValidationError(errors)

        if year and self.start_date and self.end_date:
            overlapping = Semester.objects.filter(
                academic_year=year,
                is_active=True,
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            ).exclude(pk=self.pk)
            if overlapping.exists():
                raise ValidationError(_('Thời gian học kỳ bị trùng với học kỳ khác trong năm học.'))

    def save(self, *args, **kwargs) -> None:
        if self.semester_number == 3:
            self.semester_type = SemesterType.SUMMER
        if not self.code:
            self.code = f"{self.academic_year.code}.{self.semester_number}"
        if not self.name:
            label = 'Học kỳ hè' if self.semester_number == 3 else f"Học kỳ {self.semester_number}"
            self.name = f"{label} - {self.academic_year.code}"
        super().save(*args, **kwargs)

    @property
    def is_current(self) -> bool:
        today = timezone.localdate()
        return self.start_date <= today <= self.end_date

    @property
    def is_registration_open(self) -> bool:
        if not (self.registration_start_date and self.registration_end_date):
            return False
        today = timezone.localdate()
        return self.registration_start_date <= today <= self.registration_end_date


class Department(AuditLogMixin, StatusMixin):
    """A faculty or department employing teachers and owning subjects."""

    code = models.CharField(max_length=20, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    head_teacher = models.ForeignKey(
        'teaching.Teacher',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='headed_departments',
        verbose_name=_('Head of Department')
    )
    established_date = models.DateField(null=True, blank=True, verbose_name=_('Established'))
    phone = models.CharField(max_length=20, blank=True, verbose_name=_('Phone'))
    email = models.EmailField(blank=True, verbose_name=_('Email'))
    address = models.CharField(max_length=255, blank=True, verbose_name=_('Address'))

    class Meta:
        verbose_name = _('Department')
        verbose_name_plural = _('Departments')
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs) -> None:
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)


class Degree(AuditLogMixin, StatusMixin):
    """
    An academic degree held by teachers.

    The coefficient feeds the degree adjustment of a salary calculation.
    """

    code = models.CharField(max_length=20, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=100, verbose_name=_('Name'))
    coefficient = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(Decimal('0.5')), MaxValueValidator(Decimal('5.0'))],
        verbose_name=_('Salary Coefficient')
    )
    description = models.TextField(blank=True, verbose_name=_('Description'))

    class Meta:
        verbose_name = _('Degree')
        verbose_name_plural = _('Degrees')
        ordering = ['-coefficient', 'name']

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs) -> None:
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)


class Subject(AuditLogMixin, StatusMixin):
    """
    A course in the catalogue.

    Attributes:
        credits: 1-10 in steps of 0.5.
        periods: Contact periods, defaults to credits x 15.
        prerequisites: Subjects that must be taken first. Cycles are rejected.
    """

    code = models.CharField(max_length=20, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    credits = models.DecimalField(
        max_digits=3,
        decimal_places=1,
        validators=[MinValueValidator(Decimal('1')), MaxValueValidator(Decimal('10'))],
        verbose_name=_('Credits')
    )
    coefficient = models.DecimalField(
        max_digits=3,
        decimal_places=1,
        default=Decimal('1.0'),
        validators=[MinValueValidator(Decimal('0.5')), MaxValueValidator(Decimal('3.0'))],
        verbose_name=_('Coefficient')
    )
    periods = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(15), MaxValueValidator(150)],
        verbose_name=_('Periods'),
        help_text=_('Defaults to credits x 15 when left blank.')
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name='subjects',
        verbose_name=_('Department')
    )
    description = models.TextField(blank=True, verbose_name=_('Description'))
    prerequisites = models.ManyToManyField(
        'self',
        symmetrical=False,
        blank=True,
        related_name='required_by',
        verbose_name=_('Prerequisites')
    )
    subject_type = models.CharField(
        max_length=20,
        choices=SubjectType.choices,
        default=SubjectType.MAJOR,
        verbose_name=_('Subject Type')
    )
    level = models.CharField(
        max_length=20,
        choices=SubjectLevel.choices,
        default=SubjectLevel.UNDERGRADUATE,
        verbose_name=_('Level')
    )

    class Meta:
        verbose_name = _('Subject')
        verbose_name_plural = _('Subjects')
        ordering = ['code']

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

    def clean(self) -> None:
        if self.credits is not None and (self.credits * 2) % 1 != 0:
            raise ValidationError({'credits': _('Số tín chỉ phải là bội số của 0.5.')})

    def save(self, *args, **kwargs) -> None:
        self.code = self.code.strip().upper()
        if not self.periods and self.credits:
            self.periods = int(self.credits * 15)
        super().save(*args, **kwargs)

    @property
    def total_teaching_hours(self) -> Decimal:
        return Decimal(self.periods or 0) * self.coefficient

    @property
    def salary_coefficient(self) -> Decimal:
        return self.credits * self.coefficient


class CourseClass(AuditLogMixin, StatusMixin):
    """
    A scheduled offering of a Subject in a Semester.

    The weekly slot is day_of_week (2 = Monday ... 7 = Saturday) and the
    inclusive period range start_period .. start_period + periods_count - 1.
    """

    code = models.CharField(max_length=30, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    semester = models.ForeignKey(
        Semester,
        on_delete=models.PROTECT,
        related_name='classes',
        verbose_name=_('Semester')
    )
    subject = models.ForeignKey(
        Subject,
        on_delete=models.PROTECT,
        related_name='classes',
        verbose_name=_('Subject')
    )
    student_count = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(200)],
        verbose_name=_('Enrolled Students')
    )
    max_students = models.PositiveSmallIntegerField(
        default=50,
        validators=[MinValueValidator(1), MaxValueValidator(200)],
        verbose_name=_('Capacity')
    )
    day_of_week = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(2), MaxValueValidator(7)],
        verbose_name=_('Day of Week'),
        help_text=_('2 = Monday ... 7 = Saturday.')
    )
    start_period = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(12)],
        verbose_name=_('Start Period')
    )
    periods_count = models.PositiveSmallIntegerField(
        default=2,
        validators=[MinValueValidator(1), MaxValueValidator(6)],
        verbose_name=_('Periods per Session')
    )
    room = models.CharField(max_length=50, blank=True, verbose_name=_('Room'))
    status = models.CharField(
        max_length=15,
        choices=ClassStatus.choices,
        default=ClassStatus.PLANNING,
        verbose_name=_('Status')
    )
    class_type = models.CharField(
        max_length=15,
        choices=ClassType.choices,
        default=ClassType.THEORY,
        verbose_name=_('Class Type')
    )
    teaching_method = models.CharField(
        max_length=10,
        choices=TeachingMethod.choices,
        default=TeachingMethod.OFFLINE,
        verbose_name=_('Teaching Method')
    )
    description = models.TextField(blank=True, verbose_name=_('Description'))
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Class')
        verbose_name_plural = _('Classes')
        ordering = ['code']

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

    def clean(self) -> None:
        if self.student_count and self.max_students and self.student_count > self.max_students:
            raise ValidationError({'student_count': _('Số sinh viên không được vượt quá sĩ số tối đa.')})
        if self.start_period and self.periods_count and self.end_period > 12:
            raise ValidationError({'periods_count': _('Tiết kết thúc không được vượt quá tiết 12.')})

    def save(self, *args, **kwargs) -> None:
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    @property
    def has_schedule(self) -> bool:
        return bool(self.day_of_week and self.start_period)

    @property
    def end_period(self) -> Optional[int]:
        if not self.start_period:
            return None
        return self.start_period + self.periods_count - 1

    @property
    def enrollment_percentage(self) -> int:
        if not self.max_students:
            return 0
        ratio = Decimal(self.student_count) * 100 / Decimal(self.max_students)
        return int(ratio.quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    @property
    def remaining_slots(self) -> int:
        return max(self.max_students - self.student_count, 0)

    @property
    def can_edit(self) -> bool:
        return self.status in (ClassStatus.PLANNING, ClassStatus.OPEN)

    @property
    def can_delete(self) -> bool:
        return self.status == ClassStatus.PLANNING

    @property
    def can_add_students(self) -> bool:
        return self.status == ClassStatus.OPEN and self.student_count < self.max_students

    def update_status(self) -> str:
        """Mark an open class full once enrolment reaches capacity, and back again."""
        if self.status == ClassStatus.OPEN and self.student_count >= self.max_students:
            self.status = ClassStatus.FULL
        elif self.status == ClassStatus.FULL and self.student_count < self.max_students:
            self.status = ClassStatus.OPEN
        return self.status
