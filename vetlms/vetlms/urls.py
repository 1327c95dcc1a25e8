"""
URL configuration for the vetlms project.

All JSON endpoints live under /api/: courses from the courses app, enrollments
and training records from the training app, and DRF token login.
"""
from django.contrib import admin
from django.urls import path, include
from rest_framework.authtoken.views import obtain_auth_token

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/token/', obtain_auth_token, name='api-token'),
    path('api/', include('courses.urls')),
    path('api/', include('training.urls')),
]
