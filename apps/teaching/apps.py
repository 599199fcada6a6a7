"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Teaching app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class TeachingConfig(AppConfig):
    """Configuration for teachers and teaching assignments."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.teaching'
    verbose_name = 'Teachers & Assignments'
