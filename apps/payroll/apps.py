"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Payroll app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class PayrollConfig(AppConfig):
    """Configuration for rate settings and salary calculations."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.payroll'
    verbose_name = 'Payroll'
