# Generated manually on 2026-10-18
from decimal import Decimal
import uuid

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0002_department_head_teacher'),
        ('teaching', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RateSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('code', models.CharField(blank=True, help_text='Generated as RATE<timestamp> when blank.', max_length=30, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('rate_type', models.CharField(choices=[('base_hourly', 'Base (Hourly)'), ('base_monthly', 'Base (Monthly)'), ('overtime', 'Overtime'), ('bonus', 'Bonus'), ('allowance', 'Allowance'), ('coefficient', 'Coefficient')], max_length=15, verbose_name='Rate Type')),
                ('applicable_scope', models.CharField(choices=[('university', 'University-wide'), ('department', 'Department'), ('position', 'Position'), ('degree', 'Degree'), ('subject_type', 'Subject Type'), ('class_type', 'Class Type')], default='university', max_length=15, verbose_name='Applicable Scope')),
                ('target_model', models.CharField(blank=True, choices=[('Department', 'Department'), ('Degree', 'Degree'), ('Subject', 'Subject')], max_length=15, verbose_name='Target Model')),
                ('target_id', models.UUIDField(blank=True, null=True, verbose_name='Target ID')),
                ('target_code', models.CharField(blank=True, help_text='Position, subject type or class type the rule is limited to.', max_length=30, verbose_name='Target Value')),
                ('base_amount', models.DecimalField(decimal_places=2, max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Base Amount')),
                ('minimum_rate', models.DecimalField(decimal_places=0, default=Decimal('0'), max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Minimum Amount')),
                ('maximum_rate', models.DecimalField(blank=True, decimal_places=0, max_digits=18, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Maximum Amount')),
                ('coefficient', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=4, validators=[django.core.validators.MinValueValidator(Decimal('0.1')), django.core.validators.MaxValueValidator(Decimal('5.0'))], verbose_name='Coefficient')),
                ('step_increment', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Added once per completed step of years of service.', max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Step Increment')),
                ('minimum_experience', models.PositiveSmallIntegerField(default=0, verbose_name='Minimum Experience (years)')),
                ('minimum_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=8, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Minimum Hours')),
                ('maximum_hours', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Maximum Hours')),
                ('minimum_rating', models.DecimalField(blank=True, decimal_places=2, max_digits=3, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('5'))], verbose_name='Minimum Rating')),
                ('additional_criteria', models.JSONField(blank=True, default=list, help_text='List of {"criteria_type", "operator", "value"} rules, all of which must hold.', verbose_name='Additional Criteria')),
                ('effective_start', models.DateField(verbose_name='Effective From')),
                ('effective_end', models.DateField(blank=True, null=True, verbose_name='Effective Until')),
                ('priority', models.PositiveIntegerField(default=0, verbose_name='Priority')),
                ('formula_type', models.CharField(choices=[('fixed', 'Fixed'), ('percentage', 'Percentage'), ('tiered', 'Tiered'), ('custom', 'Custom')], default='fixed', max_length=15, verbose_name='Formula Type')),
                ('formula_expression', models.CharField(blank=True, max_length=500, verbose_name='Formula Expression')),
                ('formula_variables', models.JSONField(blank=True, default=dict, verbose_name='Formula Variables')),
                ('is_approved', models.BooleanField(default=False, verbose_name='Approved')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Approved At')),
                ('approval_notes', models.TextField(blank=True, verbose_name='Approval Notes')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('pending_approval', 'Pending Approval'), ('approved', 'Approved'), ('active', 'Active'), ('inactive', 'Inactive'), ('superseded', 'Superseded')], default='draft', max_length=20, verbose_name='Status')),
                ('version', models.PositiveIntegerField(default=1, verbose_name='Version')),
                ('category', models.CharField(choices=[('salary', 'Salary'), ('bonus', 'Bonus'), ('allowance', 'Allowance'), ('overtime', 'Overtime'), ('penalty', 'Penalty')], default='salary', max_length=15, verbose_name='Category')),
                ('tags', models.JSONField(blank=True, default=list, verbose_name='Tags')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('academic_year', models.ForeignKey(blank=True, help_text='When set, the rule only applies within this academic year.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='rate_settings', to='academics.academicyear', verbose_name='Academic Year')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_rate_settings', to=settings.AUTH_USER_MODEL, verbose_name='Approved By')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(class)s_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('semester', models.ForeignKey(blank=True, help_text='When set, the rule only applies within this semester.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='rate_settings', to='academics.semester', verbose_name='Semester')),
                ('superseded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='payroll.ratesetting', verbose_name='Superseded By')),
                ('supersedes', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='payroll.ratesetting', verbose_name='Supersedes')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(class)s_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Rate Setting',
                'verbose_name_plural': 'Rate Settings',
                'ordering': ['-priority', '-effective_start', 'id'],
                'indexes': [
                    models.Index(fields=['status', 'is_active', 'rate_type'], name='payroll_rat_status_fed330_idx'),
                    models.Index(fields=['applicable_scope', 'target_id'], name='payroll_rat_applica_9d9474_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PeriodRate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('rate_per_period', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00')), django.core.validators.MaxValueValidator(Decimal('10000000'))], verbose_name='Rate per Period')),
                ('effective_date', models.DateField(verbose_name='Effective Date')),
                ('end_date', models.DateField(blank=True, null=True, verbose_name='End Date')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('approval_status', models.CharField(choices=[('draft', 'Draft'), ('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='draft', max_length=10, verbose_name='Approval Status')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Approved At')),
                ('academic_year', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='period_rates', to='academics.academicyear', verbose_name='Academic Year')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_period_rates', to=settings.AUTH_USER_MODEL, verbose_name='Approved By')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(class)s_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(class)s_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Period Rate',
                'verbose_name_plural': 'Period Rates',
                'ordering': ['-effective_date'],
            },
        ),
        migrations.CreateModel(
            name='SalaryCalculation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('calculation_code', models.CharField(blank=True, max_length=30, unique=True, verbose_name='Calculation Code')),
                ('period_type', models.CharField(choices=[('monthly', 'Monthly'), ('semester', 'Semester'), ('academic_year', 'Academic Year'), ('custom', 'Custom')], default='semester', max_length=15, verbose_name='Period Type')),
                ('period_start', models.DateField(verbose_name='Period Start')),
                ('period_end', models.DateField(verbose_name='Period End')),
                ('month', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)], verbose_name='Month')),
                ('year', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(2020)], verbose_name='Year')),
                ('total_base_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=8, verbose_name='Total Base Hours')),
                ('average_hourly_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Average Hourly Rate')),
                ('total_base_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Total Base Amount')),
                ('total_overtime_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=8, verbose_name='Total Overtime Hours')),
                ('overtime_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Overtime Rate')),
                ('total_overtime_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Total Overtime Amount')),
                ('total_bonus_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Total Bonus Amount')),
                ('total_allowance_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Total Allowance Amount')),
                ('total_deduction_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Total Deductions')),
                ('total_gross_salary', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Gross Salary')),
                ('total_net_salary', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Net Salary')),
                ('degree_coefficient', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=5, verbose_name='Degree Coefficient')),
                ('degree_applied_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Degree Adjustment')),
                ('position', models.CharField(blank=True, max_length=20, verbose_name='Position Applied')),
                ('position_coefficient', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=5, verbose_name='Position Coefficient')),
                ('position_applied_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Position Adjustment')),
                ('years_of_service', models.PositiveSmallIntegerField(default=0, verbose_name='Years of Service')),
                ('experience_coefficient', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=5, verbose_name='Experience Coefficient')),
                ('experience_applied_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Experience Adjustment')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('calculating', 'Calculating'), ('calculated', 'Calculated'), ('reviewing', 'Under Review'), ('approved', 'Approved'), ('paid', 'Paid'), ('archived', 'Archived')], default='draft', max_length=15, verbose_name='Status')),
                ('calculated_at', models.DateTimeField(blank=True, null=True, verbose_name='Calculated At')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Approved At')),
                ('paid_at', models.DateTimeField(blank=True, null=True, verbose_name='Paid At')),
                ('status_notes', models.TextField(blank=True, verbose_name='Notes')),
                ('version', models.PositiveIntegerField(default=1, verbose_name='Version')),
                ('recalculation_count', models.PositiveIntegerField(default=0, verbose_name='Recalculations')),
                ('last_recalculated_at', models.DateTimeField(blank=True, null=True, verbose_name='Last Recalculated')),
                ('calculation_method', models.CharField(choices=[('automatic', 'Automatic'), ('manual', 'Manual'), ('batch', 'Batch')], default='automatic', max_length=10, verbose_name='Calculation Method')),
                ('data_source', models.CharField(choices=[('teaching_assignments', 'Teaching Assignments'), ('manual_entry', 'Manual Entry'), ('imported', 'Imported')], default='teaching_assignments', max_length=25, verbose_name='Data Source')),
                ('validation_errors', models.JSONField(blank=True, default=list, verbose_name='Validation Errors')),
                ('warnings', models.JSONField(blank=True, default=list, verbose_name='Warnings')),
                ('academic_year', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='salary_calculations', to='academics.academicyear', verbose_name='Academic Year')),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_salaries', to=settings.AUTH_USER_MODEL, verbose_name='Approved By')),
                ('calculated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='calculated_salaries', to=settings.AUTH_USER_MODEL, verbose_name='Calculated By')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(class)s_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('degree', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='academics.degree', verbose_name='Degree Applied')),
                ('paid_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='paid_salaries', to=settings.AUTH_USER_MODEL, verbose_name='Paid By')),
                ('semester', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='salary_calculations', to='academics.semester', verbose_name='Semester')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='salary_calculations', to='teaching.teacher', verbose_name='Teacher')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(class)s_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Salary Calculation',
                'verbose_name_plural': 'Salary Calculations',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['teacher', 'academic_year', 'semester', 'period_type'], name='payroll_sal_teacher_adeb88_idx'),
                    models.Index(fields=['status', 'is_active'], name='payroll_sal_status_5cc2fa_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SalaryAssignmentLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sequence', models.PositiveIntegerField(default=0, verbose_name='Order')),
                ('assignment_type', models.CharField(max_length=15, verbose_name='Assignment Type')),
                ('total_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=8, verbose_name='Total Hours')),
                ('base_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=8, verbose_name='Base Hours')),
                ('overtime_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=8, verbose_name='Overtime Hours')),
                ('base_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Base Amount')),
                ('overtime_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Overtime Amount')),
                ('bonus_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Bonus Amount')),
                ('allowance_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Allowance Amount')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Total Amount')),
                ('calculation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='payroll.salarycalculation', verbose_name='Salary Calculation')),
                ('course_class', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='academics.courseclass', verbose_name='Class')),
                ('subject', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to='academics.subject', verbose_name='Subject')),
                ('teaching_assignment', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='salary_lines', to='teaching.teachingassignment', verbose_name='Teaching Assignment')),
            ],
            options={
                'verbose_name': 'Salary Assignment Line',
                'verbose_name_plural': 'Salary Assignment Lines',
                'ordering': ['sequence', 'id'],
            },
        ),
        migrations.CreateModel(
            name='AppliedRate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rate_type', models.CharField(choices=[('base_hourly', 'Base (Hourly)'), ('base_monthly', 'Base (Monthly)'), ('overtime', 'Overtime'), ('bonus', 'Bonus'), ('allowance', 'Allowance'), ('coefficient', 'Coefficient')], max_length=15, verbose_name='Rate Type')),
                ('rate_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Base Amount')),
                ('coefficient', models.DecimalField(decimal_places=2, max_digits=4, verbose_name='Coefficient')),
                ('hours_applied', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=8, verbose_name='Hours Applied')),
                ('calculated_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=18, verbose_name='Calculated Amount')),
                ('line', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applied_rates', to='payroll.salaryassignmentline', verbose_name='Assignment Line')),
                ('rate_setting', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='applications', to='payroll.ratesetting', verbose_name='Rate Setting')),
            ],
            options={
                'verbose_name': 'Applied Rate',
                'verbose_name_plural': 'Applied Rates',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='SalaryAuditEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('created', 'Created'), ('calculated', 'Calculated'), ('recalculated', 'Recalculated'), ('approved', 'Approved'), ('modified', 'Modified'), ('paid', 'Paid'), ('archived', 'Archived')], max_length=15, verbose_name='Action')),
                ('performed_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Performed At')),
                ('changes', models.JSONField(blank=True, default=dict, verbose_name='Changes')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('calculation', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='audit_entries', to='payroll.salarycalculation', verbose_name='Salary Calculation')),
                ('performed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='salary_audit_entries', to=settings.AUTH_USER_MODEL, verbose_name='Performed By')),
            ],
            options={
                'verbose_name': 'Salary Audit Entry',
                'verbose_name_plural': 'Salary Audit Entries',
                'ordering': ['performed_at', 'id'],
            },
        ),
    ]
