"""
Course API - CRUD for admins, status toggle, targeting-based assignment and cascading delete
"""
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsElevatedOrReadOnly, IsElevatedRole, IsSameOrganization, get_profile
from .exceptions import CourseError
from .models import Course
from .serializers import CourseAssignSerializer, CourseSerializer, CourseStatusSerializer
from .services.assignment import assign_course
from .services.deletion import delete_course

logger = logging.getLogger(__name__)


class CourseViewSet(viewsets.ModelViewSet):
    serializer_class = CourseSerializer
    permission_classes = [IsElevatedOrReadOnly, IsSameOrganization]

    def get_queryset(self):
        profile = get_profile(self.request)
        qs = Course.objects.filter(organization_id=profile.organization_id).select_related('created_by')
        if not profile.is_global_admin:
            qs = qs.filter(location_id=profile.location_id)
        if not profile.is_elevated:
            qs = qs.filter(is_active=True, is_published=True)
        return qs

    def perform_create(self, serializer):
        profile = get_profile(self.request)
        course = serializer.save(
            organization_id=profile.organization_id,
            location_id=profile.location_id,
            created_by=profile,
        )
        logger.info(f'Course {course.pk} created by {profile.pk}')

    def destroy(self, request, *args, **kwargs):
        """Delete a course and every row referencing it, in foreign-key order"""
        profile = get_profile(request)
        course_id = kwargs.get('pk')
        location_id = None if profile.is_global_admin else profile.location_id
        try:
            result = delete_course(
                course_id,
                organization_id=profile.organization_id,
                location_id=location_id,
                actor=profile,
                request=request,
            )
        except CourseError as e:
            return Response({'error': str(e)}, status=e.status_code)
        except Exception as e:
            logger.exception(f'Error deleting course {course_id}: {e}')
            return Response({'error': 'Failed to delete course'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            'message': 'Course deleted successfully',
            'id': result['id'],
            'deleted_rows': result['deleted_rows'],
        })

    @action(detail=True, methods=['patch'], url_path='status', permission_classes=[IsElevatedRole, IsSameOrganization])
    def set_status(self, request, pk=None):
        """Activate or deactivate a course"""
        course = self.get_object()
        serializer = CourseStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course.is_active = serializer.validated_data['is_active']
        course.save(update_fields=['is_active', 'updated_at'])
        return Response(CourseSerializer(course).data)

    @action(detail=True, methods=['post'], permission_classes=[IsElevatedRole, IsSameOrganization])
    def assign(self, request, pk=None):
        """Enroll every active profile the course's targeting rules select"""
        course = self.get_object()
        serializer = CourseAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = assign_course(
            course,
            assigned_by=get_profile(request),
            deadline=serializer.validated_data.get('deadline'),
        )
        return Response({
            'assigned': len(created),
            'message': f'Successfully assigned course to {len(created)} learners',
        })
