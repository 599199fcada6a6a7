"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Shared lookup and guard helpers used by the app services.
-------------------------------------------------------------------------
"""
from typing import Iterable, Optional, Tuple

from django.core.exceptions import ValidationError
from django.db import models

from apps.core.exceptions import DependencyExistsException, RecordNotFoundException


def get_by_public_id(
    model_or_queryset,
    public_id,
    message: Optional[str] = None,
    **filters
):
    """
    Fetch a record by its public UUID.

    Args:
        model_or_queryset: Model class or queryset to search.
        public_id: UUID or UUID string received from the API.
        message: Not-found message shown to the user.
        **filters: Extra lookups the record must satisfy.

    Raises:
        RecordNotFoundException: If the id is malformed or no record matches.
    """
    if isinstance(model_or_queryset, type) and issubclass(model_or_queryset, models.Model):
        queryset = model_or_queryset._default_manager.all()
    else:
        queryset = model_or_queryset

    try:
        return queryset.get(public_id=public_id, **filters)
    except (queryset.model.DoesNotExist, ValidationError, ValueError):
        raise RecordNotFoundException(message, details={'id': str(public_id)})


def ensure_no_dependents(checks: Iterable[Tuple[int, str]]) -> None:
    """
    Block a delete while dependent records exist.

    Args:
        checks: Pairs of (dependent_count, message_template). The template
                receives the count as ``{count}``.

    Raises:
        DependencyExistsException: For the first check with a non-zero count.
    """
    for count, template in checks:
        if count:
            raise DependencyExistsException(
                template.format(count=count),
                details={'dependent_count': count}
            )


