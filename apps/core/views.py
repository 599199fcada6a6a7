"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: JSON API base views. Every endpoint answers with the
             {success, data, message} envelope and maps UTPS exceptions
             to HTTP status codes at this boundary.
-------------------------------------------------------------------------
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import Paginator
from django.db import transaction
from django.http import Http404, HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.core.exceptions import PayrollException, ValidationFailedException
from apps.core.services import get_by_public_id

logger = logging.getLogger(__name__)


# =====================================================================
# RESPONSE HELPERS
# =====================================================================

def json_success(
    data: Any = None,
    message: Optional[str] = None,
    status: int = 200,
    **extra
) -> JsonResponse:
    """Build a success envelope."""
    body: Dict[str, Any] = {'success': True, 'data': data}
    if message:
        body['message'] = str(message)
    body.update(extra)
    return JsonResponse(body, status=status)


def json_error(message: str, status: int = 400, error: Optional[dict] = None) -> JsonResponse:
    """Build an error envelope."""
    body: Dict[str, Any] = {'success': False, 'message': str(message)}
    if error:
        body['error'] = error
    return JsonResponse(body, status=status)


def form_error_details(form: forms.BaseForm) -> Dict[str, List[str]]:
    """Flatten form errors into {field: [messages]}."""
    return {
        field: [str(message) for message in messages]
        for field, messages in form.errors.items()
    }


def paginate(request: HttpRequest, queryset, serializer: Callable) -> Tuple[list, dict]:
    """
    Slice a queryset using ?page= and ?limit= query parameters.

    Returns:
        Tuple of (serialized items, pagination block).
    """
    try:
        limit = int(request.GET.get('limit', settings.PAYROLL_PAGE_SIZE))
    except ValueError:
        limit = settings.PAYROLL_PAGE_SIZE
    limit = max(1, min(limit, settings.PAYROLL_MAX_PAGE_SIZE))

    paginator = Paginator(queryset, limit)
    page = paginator.get_page(request.GET.get('page', 1))

    return [serializer(item) for item in page.object_list], {
        'page': page.number,
        'limit': limit,
        'total': paginator.count,
        'pages': paginator.num_pages,
    }


# =====================================================================
# BASE VIEWS
# =====================================================================

@method_decorator(csrf_exempt, name='dispatch')
class JsonApiView(View):
    """
    Base class for JSON endpoints.

    Converts every error raised by a handler into the error envelope so
    a failing request never escapes as an HTML error page.
    """

    not_found_message = "Không tìm thấy dữ liệu."

    def dispatch(self, request: HttpRequest, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except PayrollException as exc:
            log = logger.error if exc.status_code >= 500 else logger.warning
            log(f"{request.method} {request.path} failed: {exc.error_code} {exc.message}")
            return json_error(exc.message, exc.status_code, exc.to_dict())
        except Http404:
            return json_error(self.not_found_message, 404)
        except ValidationError as exc:
            details = exc.message_dict if hasattr(exc, 'error_dict') else {'__all__': exc.messages}
            return json_error("Dữ liệu không hợp lệ.", 400, {'error_code': 'ERR_VALIDATION', 'details': details})
        except Exception as exc:
            logger.exception(f"Unhandled error on {request.method} {request.path}")
            return json_error("Lỗi máy chủ.", 500, {'error_code': 'ERR_SERVER', 'message': str(exc)})

    def get_payload(self) -> dict:
        """Parse the JSON request body into a dict."""
        if not self.request.body:
            return {}
        try:
            payload = json.loads(self.request.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationFailedException(f"JSON không hợp lệ: {e}")
        if not isinstance(payload, dict):
            raise ValidationFailedException("Dữ liệu gửi lên phải là một đối tượng JSON.")
        return payload

    @property
    def acting_user(self):
        """The authenticated user, or None for anonymous requests."""
        user = getattr(self.request, 'user', None)
        if user is not None and user.is_authenticated:
            return user
        return None


class ModelFormMixin:
    """Binds JSON payloads to a ModelForm for create and update."""

    form_class = None

    def create_form_data(self, payload: dict) -> dict:
        """Fill fields missing from a create payload with model defaults."""
        data = dict(payload)
        for name, field in self.form_class.base_fields.items():
            if name in data:
                continue
            initial = field.initial() if callable(field.initial) else field.initial
            if initial is not None:
                data[name] = initial
        return data

    def update_form_data(self, instance, payload: dict) -> dict:
        """Merge a partial update payload over the instance's current values."""
        bound = self.form_class(instance=instance)
        data = {}
        for name, field in bound.fields.items():
            value = getattr(instance, name, None)
            if isinstance(field, forms.ModelMultipleChoiceField):
                value = [field.prepare_value(obj) for obj in value.all()]
            elif isinstance(field, forms.ModelChoiceField):
                value = field.prepare_value(value) if value is not None else None
            data[name] = value
        data.update(payload)
        return data

    def bind_form(self, data: dict, instance=None) -> forms.ModelForm:
        form = self.form_class(data=data, instance=instance)
        if not form.is_valid():
            raise ValidationFailedException(
                "Dữ liệu không hợp lệ.",
                details={'fields': form_error_details(form)}
            )
        return form

    def save_form(self, form: forms.ModelForm):
        """Persist a validated form, stamping the audit user."""
        obj = form.save(commit=False)
        if hasattr(obj, 'save_with_user'):
            obj.save_with_user(self.acting_user)
        else:
            obj.save()
        form.save_m2m()
        return obj


class ModelListView(ModelFormMixin, JsonApiView):
    """
    Generic list + create endpoint.

    Subclasses set ``model``, ``form_class``, ``serializer`` and may map
    query parameters to ORM lookups through ``filter_map``.
    """

    model = None
    serializer: Callable = None
    filter_map: Dict[str, str] = {}
    search_fields: Tuple[str, ...] = ()
    created_message = "Tạo mới thành công."

    def get_queryset(self):
        return self.model._default_manager.all()

    def filter_queryset(self, queryset):
        for param, lookup in self.filter_map.items():
            value = self.request.GET.get(param)
            if value in (None, ''):
                continue
            if value in ('true', 'false'):
                value = value == 'true'
            queryset = queryset.filter(**{lookup: value})

        search = self.request.GET.get('search', '').strip()
        if search and self.search_fields:
            from django.db.models import Q
            condition = Q()
            for field in self.search_fields:
                condition |= Q(**{f"{field}__icontains": search})
            queryset = queryset.filter(condition)
        return queryset

    def get(self, request: HttpRequest, *args, **kwargs) -> JsonResponse:
        try:
            queryset = self.filter_queryset(self.get_queryset())
            items, pagination = paginate(request, queryset, type(self).serializer)
        except ValidationError:
            # Malformed UUID in a filter matches nothing
            items, pagination = [], {'page': 1, 'limit': 0, 'total': 0, 'pages': 0}
        return json_success(items, pagination=pagination)

    def post(self, request: HttpRequest, *args, **kwargs) -> JsonResponse:
        form = self.bind_form(self.create_form_data(self.get_payload()))
        with transaction.atomic():
            obj = self.perform_create(form)
        return json_success(type(self).serializer(obj), message=self.created_message, status=201)

    def perform_create(self, form: forms.ModelForm):
        return self.save_form(form)


class ModelDetailView(ModelFormMixin, JsonApiView):
    """
    Generic retrieve / update / delete endpoint keyed by public_id.

    ``delete_guard`` is called with the instance before deletion and
    raises when dependent records still exist.
    """

    model = None
    serializer: Callable = None
    delete_guard: Optional[Callable] = None
    updated_message = "Cập nhật thành công."
    deleted_message = "Xóa thành công."

    def get_queryset(self):
        return self.model._default_manager.all()

    def get_object(self, public_id):
        return get_by_public_id(self.get_queryset(), public_id, self.not_found_message)

    def get(self, request: HttpRequest, public_id) -> JsonResponse:
        return json_success(type(self).serializer(self.get_object(public_id)))

    def put(self, request: HttpRequest, public_id) -> JsonResponse:
        instance = self.get_object(public_id)
        self.check_updatable(instance)
        form = self.bind_form(self.update_form_data(instance, self.get_payload()), instance=instance)
        with transaction.atomic():
            obj = self.perform_update(form)
        return json_success(type(self).serializer(obj), message=self.updated_message)

    patch = put

    def delete(self, request: HttpRequest, public_id) -> JsonResponse:
        instance = self.get_object(public_id)
        with transaction.atomic():
            if type(self).delete_guard is not None:
                type(self).delete_guard(instance)
            self.perform_delete(instance)
        return json_success(None, message=self.deleted_message)

    def check_updatable(self, instance) -> None:
        """Hook for records that refuse edits in some states."""

    def perform_update(self, form: forms.ModelForm):
        return self.save_form(form)

    def perform_delete(self, instance) -> None:
        instance.delete()
