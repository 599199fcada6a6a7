"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Unit tests for the core module - exceptions, lookups,
             delete guards and the JSON response envelope.
-------------------------------------------------------------------------
"""
import json
from io import StringIO

from django.core.management import call_command
from django.test import RequestFactory, TestCase, override_settings

from apps.academics.models import Department
from apps.core.exceptions import (
    DependencyExistsException, PayrollException, RecordNotFoundException,
    ScheduleConflictException,
)
from apps.core.services import ensure_no_dependents, get_by_public_id
from apps.core.views import JsonApiView, json_error, json_success


class BoomView(JsonApiView):

    def get(self, request):
        raise ScheduleConflictException(details={'room': 'A101'})

    def post(self, request):
        return json_success(self.get_payload())


class ExceptionTests(TestCase):
    """Tests for the exception hierarchy."""

    def test_defaults(self) -> None:
        """Test that exceptions fall back to their default message."""
        exc = RecordNotFoundException()
        self.assertEqual(exc.status_code, 404)
        self.assertEqual(exc.to_dict(), {
            'error_code': 'ERR_NOT_FOUND',
            'message': exc.default_message,
            'details': {},
        })

    def test_custom_message(self) -> None:
        """Test that a custom message and details are carried."""
        exc = PayrollException("Lỗi", details={'field': 'x'})
        self.assertEqual(str(exc), "Lỗi")
        self.assertEqual(exc.to_dict()['details'], {'field': 'x'})


class ServiceTests(TestCase):
    """Tests for shared lookups and delete guards."""

    def setUp(self) -> None:
        """Set up test data."""
        self.department = Department.objects.create(code='KT', name='Kinh tế')

    def test_get_by_public_id(self) -> None:
        """Test that records are fetched by public id."""
        self.assertEqual(get_by_public_id(Department, self.department.public_id), self.department)
        self.assertEqual(
            get_by_public_id(Department.objects.all(), str(self.department.public_id)),
            self.department
        )

    def test_get_by_public_id_malformed(self) -> None:
        """Test that malformed or unknown ids raise not found."""
        with self.assertRaises(RecordNotFoundException):
            get_by_public_id(Department, 'not-a-uuid')
        with self.assertRaises(RecordNotFoundException) as ctx:
            get_by_public_id(Department, '00000000-0000-0000-0000-000000000000', "Không thấy")
        self.assertEqual(ctx.exception.message, "Không thấy")

    def test_ensure_no_dependents(self) -> None:
        """Test that the first non-zero count blocks with a formatted message."""
        ensure_no_dependents([(0, "never {count}")])
        with self.assertRaises(DependencyExistsException) as ctx:
            ensure_no_dependents([(0, "a {count}"), (3, "còn {count} lớp"), (5, "b {count}")])
        self.assertEqual(ctx.exception.message, "còn 3 lớp")
        self.assertEqual(ctx.exception.details, {'dependent_count': 3})


class EnvelopeTests(TestCase):
    """Tests for the JSON envelope."""

    def setUp(self) -> None:
        """Set up test data."""
        self.factory = RequestFactory()

    def test_success_envelope(self) -> None:
        """Test that success responses carry data and message."""
        body = json.loads(json_success({'a': 1}, message="OK", status=201).content)
        self.assertEqual(body, {'success': True, 'data': {'a': 1}, 'message': 'OK'})

    def test_error_envelope(self) -> None:
        """Test that error responses carry the error block."""
        response = json_error("Sai", 422, {'error_code': 'X'})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(json.loads(response.content)['error'], {'error_code': 'X'})

    def test_exception_mapped_to_envelope(self) -> None:
        """Test that a raised exception becomes an error envelope."""
        response = BoomView.as_view()(self.factory.get('/boom'))
        self.assertEqual(response.status_code, 409)
        body = json.loads(response.content)
        self.assertFalse(body['success'])
        self.assertEqual(body['error']['error_code'], 'ERR_SCHEDULE_CONFLICT')
        self.assertEqual(body['error']['details'], {'room': 'A101'})

    def test_payload_must_be_object(self) -> None:
        """Test that non-object JSON bodies are rejected."""
        request = self.factory.post('/boom', data='[1, 2]', content_type='application/json')
        response = BoomView.as_view()(request)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(json.loads(response.content)['error']['error_code'], 'ERR_VALIDATION')


class MigrationTests(TestCase):
    """Tests for the committed schema migrations."""

    @override_settings(MIGRATION_MODULES={})
    def test_models_match_committed_migrations(self) -> None:
        """Test that every model field is covered by a committed migration."""
        out = StringIO()
        try:
            call_command('makemigrations', '--check', '--dry-run', stdout=out, stderr=out)
        except SystemExit:
            self.fail(out.getvalue())
