"""
Training API - the learner's enrollments and the training record approval workflow
"""
import logging

from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import HasProfile, IsElevatedRole, get_profile
from .exceptions import CompletionConflict, QuizValidationError, TrainingError
from .models import Enrollment
from .serializers import (
    ApproveSerializer,
    DenySerializer,
    EnrollmentSerializer,
    QuizAnswersSerializer,
    TrainingRecordSerializer,
    TrainingRecordSubmitSerializer,
)
from .services import approvals
from .services.quiz_evaluator import evaluate_quiz
from .services.records import create_training_record
from .services.viewing import issue_viewing_token

logger = logging.getLogger(__name__)

UUID_LOOKUP = '[0-9a-fA-F-]{32,36}'


def _error_response(e):
    return Response({'error': str(e)}, status=e.status_code)


class EnrollmentViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """The caller's own assigned courses"""
    lookup_value_regex = UUID_LOOKUP
    serializer_class = EnrollmentSerializer
    permission_classes = [HasProfile]

    def get_queryset(self):
        profile = get_profile(self.request)
        return (
            Enrollment.objects
            .filter(user=profile, course__is_active=True)
            .select_related('course')
            .order_by('deadline', '-created_at')
        )

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['language'] = self.request.query_params.get('lang', 'en')
        return context

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        """Open the training: stamps the viewing clock and moves the enrollment to in_progress"""
        enrollment = self.get_object()
        if enrollment.is_completed:
            return _error_response(CompletionConflict())
        enrollment.status = Enrollment.STATUS_IN_PROGRESS
        enrollment.started_date = timezone.now()
        enrollment.save(update_fields=['status', 'started_date', 'updated_at'])
        return Response(self.get_serializer(enrollment).data)

    @action(detail=True, methods=['post'], url_path='content-viewed')
    def content_viewed(self, request, pk=None):
        """Mint a viewing token once the content has been open long enough"""
        enrollment = self.get_object()
        try:
            token = issue_viewing_token(enrollment)
        except TrainingError as e:
            return _error_response(e)
        return Response({'viewingToken': token})

    @action(detail=True, methods=['post'], url_path='evaluate-quiz')
    def evaluate(self, request, pk=None):
        """Score answers against the course quiz without persisting anything"""
        enrollment = self.get_object()
        serializer = QuizAnswersSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'message': 'Invalid payload', 'issues': serializer.errors},
                            status=status.HTTP_422_UNPROCESSABLE_ENTITY)

        quiz = enrollment.course.quiz
        if quiz is None:
            return _error_response(QuizValidationError('This course has no quiz'))
        try:
            evaluation = evaluate_quiz(serializer.validated_data['answers'], quiz.questions, quiz.pass_percentage)
        except TrainingError as e:
            return _error_response(e)

        data = evaluation.to_dict()
        data['pass_percentage'] = quiz.pass_percentage
        data['quiz_version'] = quiz.version
        return Response(data)


class TrainingRecordViewSet(viewsets.GenericViewSet):
    lookup_value_regex = UUID_LOOKUP
    serializer_class = TrainingRecordSerializer
    permission_classes = [HasProfile]

    def get_permissions(self):
        if self.action in ('approve', 'deny', 'pending_approvals'):
            return [IsElevatedRole()]
        return super().get_permissions()

    def list(self, request):
        """Approved records of the caller's location; staff without an elevated role only see their own"""
        profile = get_profile(request)
        qs = approvals.approved_records(profile.organization_id, profile.location_id)
        if not profile.is_elevated:
            qs = qs.filter(user=profile)
        return Response(TrainingRecordSerializer(qs, many=True).data)

    def create(self, request):
        """Submit a completed training"""
        profile = get_profile(request)
        serializer = TrainingRecordSubmitSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'message': 'Invalid payload', 'issues': serializer.errors},
                            status=status.HTTP_422_UNPROCESSABLE_ENTITY)
        data = serializer.validated_data
        try:
            record = create_training_record(
                profile,
                course_id=data['courseId'],
                enrollment_id=data['enrollmentId'],
                quiz_score=data['quizScore'],
                pass_percentage=data['passPercentage'],
                employee_signature=data['employeeSignature'],
                duration_minutes=data['durationMinutes'],
                quiz_attempt_id=data.get('quizAttemptId'),
                answers=data.get('answers'),
                time_taken_seconds=data.get('timeTakenSeconds'),
                viewing_token=data.get('viewingToken'),
                request=request,
            )
        except TrainingError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f'Error creating training record: {e}')
            return Response({'error': 'Failed to create training record'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(TrainingRecordSerializer(record).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path='pending-approvals')
    def pending_approvals(self, request):
        profile = get_profile(request)
        qs = approvals.pending_approvals(profile.organization_id, profile.location_id)
        return Response(TrainingRecordSerializer(qs, many=True).data)

    @action(detail=True, methods=['patch'])
    def approve(self, request, pk=None):
        profile = get_profile(request)
        serializer = ApproveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            record = approvals.approve_training_record(
                pk,
                supervisor=profile,
                supervisor_signature=serializer.validated_data['supervisorSignature'],
                location_id=profile.location_id,
                request=request,
            )
        except TrainingError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f'Error approving training record {pk}: {e}')
            return Response({'error': 'Failed to approve training record'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(TrainingRecordSerializer(record).data)

    @action(detail=True, methods=['patch'])
    def deny(self, request, pk=None):
        profile = get_profile(request)
        serializer = DenySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = approvals.deny_training_record(
                pk,
                location_id=profile.location_id,
                reason=serializer.validated_data.get('reason'),
                denied_by=profile,
                request=request,
            )
        except TrainingError as e:
            return _error_response(e)
        except Exception as e:
            logger.exception(f'Error denying training record {pk}: {e}')
            return Response({'error': 'Failed to deny training record'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(result)
