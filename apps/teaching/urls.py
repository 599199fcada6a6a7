"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: URL configuration for the teaching module.
-------------------------------------------------------------------------
"""
from django.urls import path

from apps.teaching import views

app_name = 'teaching'

urlpatterns = [
    path('teachers', views.TeacherListView.as_view(), name='teacher_list'),
    path('teachers/<str:public_id>', views.TeacherDetailView.as_view(), name='teacher_detail'),
    path('teachers/<str:public_id>/statistics', views.TeacherStatisticsView.as_view(), name='teacher_statistics'),
    path('teachers/<str:public_id>/availability', views.TeacherAvailabilityView.as_view(), name='teacher_availability'),
    path('teaching-assignments', views.TeachingAssignmentListView.as_view(), name='assignment_list'),
    path('teaching-assignments/<str:public_id>', views.TeachingAssignmentDetailView.as_view(), name='assignment_detail'),
    path('teaching-assignments/<str:public_id>/approve', views.AssignmentApproveView.as_view(), name='assignment_approve'),
    path('teaching-assignments/<str:public_id>/transition', views.AssignmentTransitionView.as_view(), name='assignment_transition'),
    path('teaching-assignments/<str:public_id>/cancel', views.AssignmentCancelView.as_view(), name='assignment_cancel'),
]
