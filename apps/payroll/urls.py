"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: URL configuration for the payroll module.
-------------------------------------------------------------------------
"""
from django.urls import path

from apps.payroll import views

app_name = 'payroll'

urlpatterns = [
    # Rate settings
    path('rate-settings', views.RateSettingListView.as_view(), name='rate_setting_list'),
    path('rate-settings/active/<str:rate_type>', views.ActiveRateView.as_view(), name='rate_setting_active'),
    path('rate-settings/<str:public_id>', views.RateSettingDetailView.as_view(), name='rate_setting_detail'),
    path('rate-settings/<str:public_id>/submit', views.RateSettingSubmitView.as_view(), name='rate_setting_submit'),
    path('rate-settings/<str:public_id>/approve', views.RateSettingApproveView.as_view(), name='rate_setting_approve'),
    path('rate-settings/<str:public_id>/activate', views.RateSettingActivateView.as_view(), name='rate_setting_activate'),
    path('rate-settings/<str:public_id>/deactivate', views.RateSettingDeactivateView.as_view(), name='rate_setting_deactivate'),
    path('rate-settings/<str:public_id>/supersede', views.RateSettingSupersedeView.as_view(), name='rate_setting_supersede'),
    path('rate-settings/<str:public_id>/preview', views.RatePreviewView.as_view(), name='rate_setting_preview'),

    # Period rates
    path('period-rates', views.PeriodRateListView.as_view(), name='period_rate_list'),
    path('period-rates/current', views.PeriodRateCurrentView.as_view(), name='period_rate_current'),
    path('period-rates/statistics', views.PeriodRateStatisticsView.as_view(), name='period_rate_statistics'),
    path('period-rates/<str:public_id>', views.PeriodRateDetailView.as_view(), name='period_rate_detail'),
    path('period-rates/<str:public_id>/approve', views.PeriodRateApproveView.as_view(), name='period_rate_approve'),
    path('period-rates/<str:public_id>/activate', views.PeriodRateActivateView.as_view(), name='period_rate_activate'),
    path('period-rates/<str:public_id>/deactivate', views.PeriodRateDeactivateView.as_view(), name='period_rate_deactivate'),

    # Salary calculations
    path('salaries', views.SalaryListView.as_view(), name='salary_list'),
    path('salaries/statistics', views.SalaryStatisticsView.as_view(), name='salary_statistics'),
    path('salaries/department-summary', views.SalaryDepartmentSummaryView.as_view(), name='salary_department_summary'),
    path('salaries/batch-calculate', views.SalaryBatchCalculateView.as_view(), name='salary_batch_calculate'),
    path('salaries/export', views.SalaryExportView.as_view(), name='salary_export'),
    path('salaries/period', views.SalaryByPeriodView.as_view(), name='salary_by_period'),
    path('salaries/teacher/<str:teacher_id>', views.SalaryByTeacherView.as_view(), name='salary_by_teacher'),
    path('salaries/<str:public_id>', views.SalaryDetailView.as_view(), name='salary_detail'),
    path('salaries/<str:public_id>/calculate', views.SalaryCalculateView.as_view(), name='salary_calculate'),
    path('salaries/<str:public_id>/approve', views.SalaryApproveView.as_view(), name='salary_approve'),
    path('salaries/<str:public_id>/mark-paid', views.SalaryMarkPaidView.as_view(), name='salary_mark_paid'),
]
