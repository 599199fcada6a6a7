"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Tests for the payroll JSON endpoints.
-------------------------------------------------------------------------
"""
import json
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import Client, TestCase
from django.urls import reverse

from apps.core.testing import (
    create_assignment, create_calendar, create_class, create_degree, create_department,
    create_rate, create_subject, create_teacher, days_ago,
)
from apps.payroll.exports import XLSX_CONTENT_TYPE
from apps.payroll.models import (
    CalculationStatus, PeriodRate, RateSetting, RateSettingStatus, SalaryCalculation,
)
from apps.payroll.services_salary import calculate_salary

User = get_user_model()


class PayrollViewTestCase(TestCase):
    """Authenticated client plus the standard salary fixture."""

    def setUp(self) -> None:
        """Set up test data."""
        self.client = Client()
        self.user = User.objects.create_user(username='ketoan', password='testpass123')
        self.client.force_login(self.user)

        self.year, self.semester = create_calendar()
        self.department = create_department()
        self.degree = create_degree(coefficient='1.50')
        self.subject = create_subject(self.department)
        self.course_class = create_class(self.semester, self.subject)
        self.teacher = create_teacher(self.department, self.degree)
        self.assignment = create_assignment(self.teacher, self.course_class)
        self.rate = create_rate()

    def post_json(self, url: str, data=None):
        return self.client.post(url, data=json.dumps(data or {}), content_type='application/json')

    def put_json(self, url: str, data):
        return self.client.put(url, data=json.dumps(data), content_type='application/json')

    def create_payload(self, **extra) -> dict:
        payload = {
            'teacher_id': str(self.teacher.public_id),
            'academic_year_id': str(self.year.public_id),
            'semester_id': str(self.semester.public_id),
            'period_type': 'semester',
            'period_start': self.semester.start_date.isoformat(),
            'period_end': self.semester.end_date.isoformat(),
        }
        payload.update(extra)
        return payload


class SalaryEndpointTests(PayrollViewTestCase):
    """Test the salary calculation endpoints."""

    def test_full_workflow(self) -> None:
        """Test that create, calculate, approve and mark-paid work end to end."""
        response = self.post_json(reverse('payroll:salary_list'), self.create_payload())
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        salary_id = body['data']['id']
        self.assertEqual(len(body['data']['teaching_assignments']), 1)

        response = self.post_json(reverse('payroll:salary_calculate', args=[salary_id]))
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['total_gross_salary'], 6200000.0)
        self.assertEqual(data['coefficients']['degree']['applied_amount'], 2000000.0)
        self.assertEqual(data['calculation_status']['calculated_by'], 'ketoan')

        response = self.post_json(reverse('payroll:salary_approve', args=[salary_id]), {'notes': 'Đồng ý'})
        self.assertEqual(response.status_code, 200)
        response = self.post_json(reverse('payroll:salary_mark_paid', args=[salary_id]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['status'], CalculationStatus.PAID)

        actions = [entry['action'] for entry in response.json()['data']['audit_trail']]
        self.assertEqual(actions, ['created', 'calculated', 'approved', 'paid'])

    def test_create_requires_ids(self) -> None:
        """Test that missing teacher/year/semester ids answer 400."""
        payload = self.create_payload()
        del payload['teacher_id']
        response = self.post_json(reverse('payroll:salary_list'), payload)
        self.assertEqual(response.status_code, 400)
        self.assertIn('teacher_id', response.json()['error']['details']['fields'])

    def test_create_unknown_teacher(self) -> None:
        """Test that an unknown teacher id answers 404."""
        response = self.post_json(reverse('payroll:salary_list'), self.create_payload(teacher_id=str(uuid4())))
        self.assertEqual(response.status_code, 404)

    def test_duplicate_answers_conflict(self) -> None:
        """Test that a second calculation for the same period answers 409."""
        self.post_json(reverse('payroll:salary_list'), self.create_payload())
        response = self.post_json(reverse('payroll:salary_list'), self.create_payload())
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_DUPLICATE')

    def test_approve_draft_rejected(self) -> None:
        """Test that approving an uncalculated record answers 400."""
        salary_id = self.post_json(reverse('payroll:salary_list'), self.create_payload()).json()['data']['id']
        response = self.post_json(reverse('payroll:salary_approve', args=[salary_id]))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_INVALID_TRANSITION')

    def test_put_with_stale_version(self) -> None:
        """Test that PUT with an old version answers 409 and a fresh one succeeds."""
        data = self.post_json(reverse('payroll:salary_list'), self.create_payload()).json()['data']
        url = reverse('payroll:salary_detail', args=[data['id']])

        response = self.put_json(url, {'status_notes': 'a', 'version': data['version'] + 3})
        self.assertEqual(response.status_code, 409)

        response = self.put_json(url, {'total_deduction_amount': '100000', 'version': data['version']})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['calculation_results']['total_deduction_amount'], 100000.0)
        self.assertEqual(response.json()['data']['version'], data['version'] + 1)

    def test_delete_archives(self) -> None:
        """Test that DELETE archives the calculation and hides it from the list."""
        salary_id = self.post_json(reverse('payroll:salary_list'), self.create_payload()).json()['data']['id']

        response = self.client.delete(reverse('payroll:salary_detail', args=[salary_id]))
        self.assertEqual(response.status_code, 200)

        calculation = SalaryCalculation.objects.get(public_id=salary_id)
        self.assertEqual(calculation.status, CalculationStatus.ARCHIVED)
        listing = self.client.get(reverse('payroll:salary_list')).json()
        self.assertEqual(listing['pagination']['total'], 0)

    def test_batch_calculate(self) -> None:
        """Test that batch calculation reports successes and failures."""
        salary_id = self.post_json(reverse('payroll:salary_list'), self.create_payload()).json()['data']['id']
        response = self.post_json(reverse('payroll:salary_batch_calculate'), {'ids': [salary_id, 'not-a-uuid']})
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(len(data['succeeded']), 1)
        self.assertEqual(len(data['failed']), 1)

    def test_batch_requires_ids(self) -> None:
        """Test that an empty batch answers 400."""
        response = self.post_json(reverse('payroll:salary_batch_calculate'), {'ids': []})
        self.assertEqual(response.status_code, 400)

    def test_statistics_and_summary(self) -> None:
        """Test that statistics and the department summary aggregate calculations."""
        salary_id = self.post_json(reverse('payroll:salary_list'), self.create_payload()).json()['data']['id']
        calculate_salary(SalaryCalculation.objects.get(public_id=salary_id))

        response = self.client.get(reverse('payroll:salary_statistics'), {'group_by': 'department'})
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['totals']['total_net_salary'], 6200000.0)
        self.assertEqual(len(data['by_department']), 1)

        response = self.client.get(reverse('payroll:salary_department_summary'))
        self.assertEqual(response.json()['data'][0]['calculation_count'], 1)

    def test_by_teacher_and_period(self) -> None:
        """Test the teacher and period listings."""
        self.post_json(reverse('payroll:salary_list'), self.create_payload())

        response = self.client.get(reverse('payroll:salary_by_teacher', args=[self.teacher.public_id]))
        self.assertEqual(response.json()['pagination']['total'], 1)

        response = self.client.get(reverse('payroll:salary_by_period'), {
            'period_type': 'semester',
            'start_date': '2024-01-01',
            'end_date': '2025-12-31',
        })
        self.assertEqual(response.json()['pagination']['total'], 1)

        response = self.client.get(reverse('payroll:salary_by_period'), {'period_type': 'weekly'})
        self.assertEqual(response.status_code, 400)

    def test_export_returns_workbook(self) -> None:
        """Test that the export answers with an Excel attachment."""
        self.post_json(reverse('payroll:salary_list'), self.create_payload())
        response = self.client.get(reverse('payroll:salary_export'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], XLSX_CONTENT_TYPE)
        self.assertIn('attachment;', response['Content-Disposition'])


class RateEndpointTests(PayrollViewTestCase):
    """Test the rate setting and period rate endpoints."""

    def test_create_and_lifecycle(self) -> None:
        """Test that a new rate can be approved, activated and superseded over the API."""
        response = self.post_json(reverse('payroll:rate_setting_list'), {
            'name': 'Phụ cấp thâm niên',
            'rate_type': 'allowance',
            'base_amount': '250000',
            'effective_start': days_ago(1).isoformat(),
            'additional_criteria': [],
        })
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['status'], RateSettingStatus.DRAFT)
        rate_id = data['id']

        response = self.post_json(reverse('payroll:rate_setting_activate', args=[rate_id]))
        self.assertEqual(response.status_code, 400)

        self.post_json(reverse('payroll:rate_setting_approve', args=[rate_id]), {'notes': 'OK'})
        response = self.post_json(reverse('payroll:rate_setting_activate', args=[rate_id]))
        self.assertEqual(response.json()['data']['status'], RateSettingStatus.ACTIVE)

        response = self.post_json(reverse('payroll:rate_setting_supersede', args=[rate_id]),
                                  {'changes': {'base_amount': '300000'}})
        self.assertEqual(response.status_code, 200)
        replacement = response.json()['data']
        self.assertEqual(replacement['supersedes'], rate_id)
        self.assertEqual(replacement['rate_values']['base_amount'], 300000.0)

        response = self.put_json(reverse('payroll:rate_setting_detail', args=[rate_id]), {'name': 'Đổi tên'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_IMMUTABLE_RECORD')

    def test_put_checks_version(self) -> None:
        """Test that editing a stale rate version answers 409 and a fresh one bumps it."""
        url = reverse('payroll:rate_setting_detail', args=[self.rate.public_id])

        response = self.put_json(url, {'name': 'Mức giờ chuẩn', 'version': 7})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_VERSION_CONFLICT')

        response = self.put_json(url, {'name': 'Mức giờ chuẩn', 'version': self.rate.version})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['name'], 'Mức giờ chuẩn')
        self.assertEqual(response.json()['data']['version'], self.rate.version + 1)

    def test_active_rate_lookup(self) -> None:
        """Test that the active rate of a type is returned and unknown types rejected."""
        response = self.client.get(reverse('payroll:rate_setting_active', args=['base_hourly']))
        self.assertEqual(response.json()['data']['id'], str(self.rate.public_id))

        response = self.client.get(reverse('payroll:rate_setting_active', args=['overtime']))
        self.assertEqual(response.status_code, 404)

        response = self.client.get(reverse('payroll:rate_setting_active', args=['weekly']))
        self.assertEqual(response.status_code, 400)

    def test_preview(self) -> None:
        """Test that preview evaluates the rate without saving."""
        response = self.post_json(reverse('payroll:rate_setting_preview', args=[self.rate.public_id]),
                                  {'hours': '12'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['calculated_amount'], 1200000.0)

    def test_delete_blocked_once_applied(self) -> None:
        """Test that a rate used by a calculation cannot be deleted."""
        salary_id = self.post_json(reverse('payroll:salary_list'), self.create_payload()).json()['data']['id']
        self.post_json(reverse('payroll:salary_calculate', args=[salary_id]))

        response = self.client.delete(reverse('payroll:rate_setting_detail', args=[self.rate.public_id]))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_DEPENDENCY_EXISTS')
        self.assertTrue(RateSetting.objects.filter(pk=self.rate.pk).exists())

    def test_period_rate_current(self) -> None:
        """Test that the current period rate is the approved active one."""
        response = self.post_json(reverse('payroll:period_rate_list'), {
            'name': 'Đơn giá 2024',
            'rate_per_period': '150000',
            'academic_year': str(self.year.public_id),
            'effective_date': days_ago(5).isoformat(),
        })
        self.assertEqual(response.status_code, 201)
        period_rate_id = response.json()['data']['id']

        url = reverse('payroll:period_rate_current')
        self.assertEqual(self.client.get(url, {'academic_year': self.year.public_id}).status_code, 404)

        self.post_json(reverse('payroll:period_rate_approve', args=[period_rate_id]))
        response = self.client.get(url, {'academic_year': self.year.public_id})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['rate_per_period'], 150000.0)
        self.assertEqual(PeriodRate.objects.get(public_id=period_rate_id).approved_by, self.user)

        response = self.client.get(reverse('payroll:period_rate_statistics'), {'academic_year': self.year.public_id})
        self.assertEqual(response.json()['data'], {
            'total_rates': 1, 'active_rates': 1, 'current_rate': 150000.0, 'highest_rate': 150000.0,
        })
        self.assertEqual(self.client.get(reverse('payroll:period_rate_statistics')).status_code, 400)

        response = self.post_json(reverse('payroll:period_rate_deactivate', args=[period_rate_id]))
        self.assertFalse(response.json()['data']['is_active'])
        self.assertEqual(self.client.get(url, {'academic_year': self.year.public_id}).status_code, 404)

    def test_unknown_rate_answers_not_found(self) -> None:
        """Test that a malformed id answers 404 with the error envelope."""
        response = self.client.get(reverse('payroll:rate_setting_detail', args=['abc']))
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()['success'])
