"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Root URL configuration. The JSON API lives under /api/.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('apps.academics.urls')),
    path('api/', include('apps.teaching.urls')),
    path('api/', include('apps.payroll.urls')),
]
