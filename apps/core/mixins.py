"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Reusable model mixins for public identifiers, timestamps,
             audit users and the active flag.
-------------------------------------------------------------------------
"""
import uuid
from typing import Optional
from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _


class UUIDMixin(models.Model):
    """
    Abstract mixin that adds a public_id UUID field.

    Used for external references (APIs, URLs) while keeping
    integer IDs for internal foreign keys.
    """

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        db_index=True,
        verbose_name=_("Public ID"),
        help_text=_("Unique UUID for external reference.")
    )

    class Meta:
        abstract = True


class TimeStampedMixin(UUIDMixin):
    """
    Abstract mixin that adds created_at and updated_at timestamps.

    Attributes:
        created_at: Timestamp when the record was created.
        updated_at: Timestamp when the record was last modified.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_("Created At"),
        help_text=_("Timestamp when this record was created.")
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_("Updated At"),
        help_text=_("Timestamp when this record was last modified.")
    )

    class Meta:
        abstract = True


class AuditLogMixin(TimeStampedMixin):
    """
    Abstract mixin that adds audit fields for user tracking.

    Extends TimeStampedMixin with created_by and updated_by fields
    to track which user created or modified a record.
    """

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="%(class)s_created",
        null=True,
        blank=True,
        verbose_name=_("Created By"),
        help_text=_("User who created this record.")
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="%(class)s_updated",
        null=True,
        blank=True,
        verbose_name=_("Updated By"),
        help_text=_("User who last modified this record.")
    )

    class Meta:
        abstract = True

    def save_with_user(self, user: Optional[object] = None, *args, **kwargs) -> None:
        """
        Save the model while setting the audit user fields.

        Args:
            user: The user performing the save operation. Anonymous
                  users are ignored.
        """
        if user is not None and getattr(user, 'is_authenticated', False):
            if self.pk is None:
                self.created_by = user
            self.updated_by = user
        self.save(*args, **kwargs)


class StatusMixin(models.Model):
    """
    Abstract mixin for records that can be retired without deletion.

    Provides the is_active flag used by soft deletes and lookups.
    """

    is_active = models.BooleanField(
        default=True,
        verbose_name=_("Is Active"),
        help_text=_("Whether this record is active in the system.")
    )

    class Meta:
        abstract = True
