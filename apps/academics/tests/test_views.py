"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Tests for the academics JSON endpoints.
-------------------------------------------------------------------------
"""
import json

from django.test import Client, TestCase
from django.urls import reverse

from apps.academics.models import Department
from apps.core.testing import create_calendar, create_class, create_department, create_subject


class AcademicsViewTest(TestCase):
    """Test CRUD endpoints of the academic catalogue."""

    def setUp(self) -> None:
        """Set up test data."""
        self.client = Client()
        self.year, self.semester = create_calendar()
        self.department = create_department()
        self.subject = create_subject(self.department)

    def send(self, method: str, url: str, data=None):
        return getattr(self.client, method)(url, data=json.dumps(data or {}), content_type='application/json')

    def test_create_department(self) -> None:
        """Test that a department is created with an uppercased code."""
        response = self.send('post', reverse('academics:department_list'), {'code': 'kt', 'name': 'Kinh tế'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['code'], 'KT')
        self.assertTrue(Department.objects.filter(code='KT').exists())

    def test_create_validation_error(self) -> None:
        """Test that missing required fields answer 400 with field details."""
        response = self.send('post', reverse('academics:department_list'), {'code': 'KT'})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertIn('name', body['error']['details']['fields'])

    def test_malformed_json(self) -> None:
        """Test that a body that is not JSON answers 400."""
        response = self.client.post(reverse('academics:department_list'), data='{oops',
                                    content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_list_pagination_and_search(self) -> None:
        """Test that lists are paginated and searchable."""
        for index in range(3):
            create_department(code=f'D{index}', name=f'Khoa {index}')
        response = self.client.get(reverse('academics:department_list'), {'limit': 2})
        body = response.json()
        self.assertEqual(len(body['data']), 2)
        self.assertEqual(body['pagination']['total'], 4)
        self.assertEqual(body['pagination']['pages'], 2)

        response = self.client.get(reverse('academics:department_list'), {'search': 'Khoa 1'})
        self.assertEqual(response.json()['pagination']['total'], 1)

    def test_partial_update(self) -> None:
        """Test that PUT merges over the current values."""
        url = reverse('academics:department_detail', args=[self.department.public_id])
        response = self.send('put', url, {'phone': '0243000000'})
        self.assertEqual(response.status_code, 200)
        self.department.refresh_from_db()
        self.assertEqual(self.department.phone, '0243000000')
        self.assertEqual(self.department.code, 'CNTT')

    def test_delete_blocked_by_dependents(self) -> None:
        """Test that deleting a department with subjects answers 400."""
        response = self.client.delete(reverse('academics:department_detail', args=[self.department.public_id]))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_DEPENDENCY_EXISTS')

    def test_unknown_id(self) -> None:
        """Test that unknown and malformed ids answer 404."""
        response = self.client.get(reverse('academics:department_detail', args=['not-a-uuid']))
        self.assertEqual(response.status_code, 404)

    def test_room_conflict_on_create(self) -> None:
        """Test that booking an occupied room slot answers 409."""
        create_class(self.semester, self.subject, code='INT1001.01', room='B201')
        response = self.send('post', reverse('academics:class_list'), {
            'code': 'INT1001.02',
            'name': 'Lớp 2',
            'semester': str(self.semester.public_id),
            'subject': str(self.subject.public_id),
            'day_of_week': 2,
            'start_period': 2,
            'periods_count': 2,
            'room': 'B201',
        })
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error']['error_code'], 'ERR_SCHEDULE_CONFLICT')

    def test_prerequisite_cycle_rejected(self) -> None:
        """Test that a subject cannot require one of its dependents."""
        dependent = create_subject(self.department, code='INT2002')
        dependent.prerequisites.add(self.subject)

        url = reverse('academics:subject_detail', args=[self.subject.public_id])
        response = self.send('put', url, {'prerequisites': [str(dependent.public_id)]})
        self.assertEqual(response.status_code, 400)
        self.assertIn('prerequisites', response.json()['error']['details']['fields'])

    def test_semester_filter(self) -> None:
        """Test that semesters can be listed by academic year."""
        create_calendar(2030)
        response = self.client.get(reverse('academics:semester_list'), {'academic_year': self.year.public_id})
        self.assertEqual(response.json()['pagination']['total'], 1)
