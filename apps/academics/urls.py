"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: URL configuration for the academics module.
-------------------------------------------------------------------------
"""
from django.urls import path

from apps.academics import views

app_name = 'academics'

urlpatterns = [
    path('academic-years', views.AcademicYearListView.as_view(), name='academic_year_list'),
    path('academic-years/<str:public_id>', views.AcademicYearDetailView.as_view(), name='academic_year_detail'),
    path('semesters', views.SemesterListView.as_view(), name='semester_list'),
    path('semesters/<str:public_id>', views.SemesterDetailView.as_view(), name='semester_detail'),
    path('departments', views.DepartmentListView.as_view(), name='department_list'),
    path('departments/<str:public_id>', views.DepartmentDetailView.as_view(), name='department_detail'),
    path('degrees', views.DegreeListView.as_view(), name='degree_list'),
    path('degrees/<str:public_id>', views.DegreeDetailView.as_view(), name='degree_detail'),
    path('subjects', views.SubjectListView.as_view(), name='subject_list'),
    path('subjects/<str:public_id>', views.SubjectDetailView.as_view(), name='subject_detail'),
    path('classes', views.CourseClassListView.as_view(), name='class_list'),
    path('classes/<str:public_id>', views.CourseClassDetailView.as_view(), name='class_detail'),
]
