"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Tests for the teaching JSON endpoints.
-------------------------------------------------------------------------
"""
import json

from django.test import Client, TestCase
from django.urls import reverse

from apps.core.testing import (
    create_assignment, create_calendar, create_class, create_degree, create_department,
    create_subject, create_teacher, days_ago,
)
from apps.teaching.models import AssignmentStatus


class TeachingViewTest(TestCase):
    """Test teacher and assignment endpoints."""

    def setUp(self) -> None:
        """Set up test data."""
        self.client = Client()
        self.year, self.semester = create_calendar()
        self.department = create_department()
        self.degree = create_degree()
        self.subject = create_subject(self.department)
        self.teacher = create_teacher(self.department, self.degree)
        self.first = create_class(self.semester, self.subject, code='C.01', day_of_week=4, start_period=1)
        self.second = create_class(self.semester, self.subject, code='C.02', day_of_week=4, start_period=2)

    def post_json(self, url: str, data=None):
        return self.client.post(url, data=json.dumps(data or {}), content_type='application/json')

    def test_create_teacher(self) -> None:
        """Test that a teacher is created and years of service are derived."""
        response = self.post_json(reverse('teaching:teacher_list'), {
            'code': 'gv100',
            'full_name': 'Nguyễn Văn A',
            'email': 'A@University.edu.vn',
            'department': str(self.department.public_id),
            'degree': str(self.degree.public_id),
            'hire_date': days_ago(800).isoformat(),
        })
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['code'], 'GV100')
        self.assertEqual(data['email'], 'a@university.edu.vn')
        self.assertEqual(data['years_of_service'], 2)

    def test_duplicate_email_rejected(self) -> None:
        """Test that a second teacher with the same email answers 400."""
        response = self.post_json(reverse('teaching:teacher_list'), {
            'code': 'GV200',
            'full_name': 'Trần B',
            'email': self.teacher.email,
            'department': str(self.department.public_id),
            'degree': str(self.degree.public_id),
            'hire_date': days_ago(10).isoformat(),
        })
        self.assertEqual(response.status_code, 400)

    def test_create_assignment_conflict(self) -> None:
        """Test that double-booking a teacher answers 409."""
        create_assignment(self.teacher, self.first)
        response = self.post_json(reverse('teaching:assignment_list'), {
            'teacher': str(self.teacher.public_id),
            'course_class': str(self.second.public_id),
            'teaching_hours': '30',
        })
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_SCHEDULE_CONFLICT')

    def test_availability(self) -> None:
        """Test that availability reports the clashing assignment."""
        assignment = create_assignment(self.teacher, self.first)
        url = reverse('teaching:teacher_availability', args=[self.teacher.public_id])

        response = self.client.get(url, {'class': self.second.public_id})
        data = response.json()['data']
        self.assertFalse(data['available'])
        self.assertEqual(data['conflicts'][0]['assignment_id'], str(assignment.public_id))

        self.assertEqual(self.client.get(url).status_code, 400)

    def test_workflow_endpoints(self) -> None:
        """Test approve, transition and cancel over the API."""
        assignment = create_assignment(self.teacher, self.first, status=AssignmentStatus.ASSIGNED)

        response = self.post_json(reverse('teaching:assignment_approve', args=[assignment.public_id]))
        self.assertEqual(response.json()['data']['status'], AssignmentStatus.CONFIRMED)

        url = reverse('teaching:assignment_transition', args=[assignment.public_id])
        self.assertEqual(self.post_json(url).status_code, 400)
        response = self.post_json(url, {'status': AssignmentStatus.IN_PROGRESS})
        self.assertEqual(response.json()['data']['status'], AssignmentStatus.IN_PROGRESS)

        response = self.post_json(reverse('teaching:assignment_cancel', args=[assignment.public_id]),
                                  {'reason': 'Nghỉ phép'})
        self.assertEqual(response.json()['data']['status'], AssignmentStatus.CANCELLED)

    def test_statistics_endpoint(self) -> None:
        """Test that teacher statistics are returned."""
        create_assignment(self.teacher, self.first, hours='12')
        response = self.client.get(reverse('teaching:teacher_statistics', args=[self.teacher.public_id]))
        self.assertEqual(response.json()['data']['total_teaching_hours'], 12.0)
