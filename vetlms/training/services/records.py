"""
Training record creation - the learner's signed completion, written atomically
with the enrollment update and the quiz attempt it is based on.
"""
import logging
import math

from django.db import transaction
from django.utils import timezone

from training.conf import flow_setting
from training.exceptions import (
    CompletionConflict,
    EnrollmentNotFound,
    QuizAttemptNotFound,
    QuizValidationError,
    SignatureValidationError,
)
from training.models import Enrollment, QuizAttempt, TrainingRecord
from training.services.audit import record_audit
from training.services.quiz_evaluator import evaluate_quiz
from training.services.viewing import verify_viewing_token

logger = logging.getLogger(__name__)


def create_training_record(profile, course_id, enrollment_id, quiz_score, pass_percentage,
                           employee_signature, duration_minutes, quiz_attempt_id=None,
                           answers=None, time_taken_seconds=None, viewing_token=None, request=None):
    """
    Record a completed training for `profile`.

    In one transaction: inserts a pending_review TrainingRecord, marks the
    enrollment completed and links (or creates) the QuizAttempt behind the
    score. Any failure rolls every write back.

    Raises:
        EnrollmentNotFound: no enrollment with this id for this user and course
        CompletionConflict: the enrollment is already completed
        QuizAttemptNotFound: quiz_attempt_id does not belong to this user and course
        QuizValidationError: answers disagree with quiz_score, or the score is below the pass mark
        ViewingTokenError: a viewing token is required or supplied and does not verify
    """
    signature = (employee_signature or '').strip()
    if not signature:
        raise SignatureValidationError('Employee signature is required')

    with transaction.atomic():
        enrollment = (
            Enrollment.objects.select_for_update()
            .filter(pk=enrollment_id, user=profile, course_id=course_id)
            .first()
        )
        if enrollment is None:
            raise EnrollmentNotFound()
        if enrollment.is_completed:
            raise CompletionConflict()

        course = enrollment.course
        if viewing_token or flow_setting('REQUIRE_VIEWING_TOKEN'):
            verify_viewing_token(viewing_token, enrollment.pk)

        quiz = course.quiz
        evaluation = None
        if answers:
            if quiz is None:
                raise QuizValidationError('This course has no quiz to answer')
            evaluation = evaluate_quiz(answers, quiz.questions, course.pass_percentage)
            if evaluation.score != quiz_score:
                raise QuizValidationError('Quiz score does not match the submitted answers')

        if pass_percentage != course.pass_percentage:
            logger.warning(
                f'Completion for enrollment {enrollment.pk} sent pass percentage {pass_percentage}, '
                f'course requires {course.pass_percentage}'
            )
        if quiz_score < course.pass_percentage:
            raise QuizValidationError(f'You need {course.pass_percentage}% to pass. Please review and try again.')

        now = timezone.now()
        record = TrainingRecord.objects.create(
            organization_id=profile.organization_id,
            location_id=profile.location_id,
            user=profile,
            course=course,
            enrollment=enrollment,
            completion_date=now,
            quiz_score=quiz_score,
            employee_signature_data=signature,
            employee_signature_date=now,
            approval_status=TrainingRecord.APPROVAL_PENDING,
        )

        enrollment.status = Enrollment.STATUS_COMPLETED
        enrollment.completed_date = now
        enrollment.progress_percentage = 100
        enrollment.attempt_count += 1
        enrollment.save(update_fields=['status', 'completed_date', 'progress_percentage', 'attempt_count', 'updated_at'])

        attempt = None
        if quiz_attempt_id:
            attempt = QuizAttempt.objects.filter(pk=quiz_attempt_id, user=profile, course=course).first()
            if attempt is None:
                raise QuizAttemptNotFound()
        elif quiz is not None:
            if time_taken_seconds is None:
                time_taken_seconds = math.floor((duration_minutes or flow_setting('DEFAULT_CONTENT_MINUTES')) * 60)
            attempt = QuizAttempt.objects.create(
                user=profile,
                course=course,
                quiz_version=quiz.version,
                answers=list(answers or []),
                score=evaluation.correct_count if evaluation else quiz_score,
                percentage=quiz_score,
                passed=quiz_score >= course.pass_percentage,
                attempt_number=enrollment.attempt_count,
                time_taken_seconds=time_taken_seconds,
            )

        if attempt is not None:
            record.quiz_attempt = attempt
            record.save(update_fields=['quiz_attempt', 'updated_at'])

        record_audit(
            'training_record.submitted',
            'training_record',
            record.pk,
            organization_id=profile.organization_id,
            actor=profile,
            details={
                'course_id': str(course.pk),
                'enrollment_id': str(enrollment.pk),
                'quiz_attempt_id': str(attempt.pk) if attempt else None,
                'quiz_score': quiz_score,
                'attempt_number': enrollment.attempt_count,
            },
            request=request,
        )

    logger.info(f'Training record {record.pk} submitted for enrollment {enrollment.pk} (score {quiz_score})')
    return record
