from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import EnrollmentViewSet, TrainingRecordViewSet

router = DefaultRouter()
router.register(r'enrollments', EnrollmentViewSet, basename='enrollment')
router.register(r'training-records', TrainingRecordViewSet, basename='training-record')

urlpatterns = [
    path('', include(router.urls)),
]
