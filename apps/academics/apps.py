"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Academics app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class AcademicsConfig(AppConfig):
    """Configuration for the academic calendar and catalogue."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.academics'
    verbose_name = 'Academic Calendar & Catalogue'
