"""
Supervisor review of training records.

pending_review -> approved is terminal and keeps the record forever.
Denial undoes the completion instead: the record and its quiz attempt are
deleted and the enrollment goes back to in_progress, leaving only an audit
entry behind.
"""
import logging

from django.db import transaction
from django.utils import timezone

from training.exceptions import ApprovalStateError, SignatureValidationError, TrainingRecordNotFound
from training.models import Enrollment, QuizAttempt, TrainingRecord
from training.services.audit import record_audit

logger = logging.getLogger(__name__)


def _locked_record(record_id, location_id):
    record = TrainingRecord.objects.select_for_update().filter(pk=record_id, location_id=location_id).first()
    if record is None:
        raise TrainingRecordNotFound()
    return record


def approve_training_record(record_id, supervisor, supervisor_signature, location_id, request=None):
    """
    Countersign a training record. Approving again re-stamps the supervisor fields.
    The caller is responsible for checking the supervisor's role.
    """
    signature = (supervisor_signature or '').strip()
    if not signature:
        raise SignatureValidationError('Supervisor signature is required')

    with transaction.atomic():
        record = _locked_record(record_id, location_id)
        record.approval_status = TrainingRecord.APPROVAL_APPROVED
        record.supervisor = supervisor
        record.supervisor_signature_data = signature
        record.supervisor_signature_date = timezone.now()
        record.save(update_fields=[
            'approval_status', 'supervisor', 'supervisor_signature_data',
            'supervisor_signature_date', 'updated_at',
        ])
        record_audit(
            'training_record.approved',
            'training_record',
            record.pk,
            organization_id=record.organization_id,
            actor=supervisor,
            details={'course_id': str(record.course_id), 'user_id': str(record.user_id)},
            request=request,
        )

    logger.info(f'Training record {record.pk} approved by {supervisor.pk}')
    return record


def deny_training_record(record_id, location_id, reason=None, denied_by=None, request=None):
    """
    Reject a pending record: delete it with its quiz attempt and reset the enrollment.

    Raises:
        TrainingRecordNotFound: nothing matches in this location; nothing is changed
        ApprovalStateError: the record is already approved
    """
    with transaction.atomic():
        record = _locked_record(record_id, location_id)
        if record.is_approved:
            raise ApprovalStateError()

        attempt_id = record.quiz_attempt_id
        enrollment_id = record.enrollment_id
        details = {
            'reason': reason or '',
            'course_id': str(record.course_id),
            'user_id': str(record.user_id),
            'enrollment_id': str(enrollment_id),
            'quiz_attempt_id': str(attempt_id) if attempt_id else None,
            'quiz_score': record.quiz_score,
        }

        record.delete()
        if attempt_id:
            QuizAttempt.objects.filter(pk=attempt_id).delete()

        Enrollment.objects.filter(pk=enrollment_id).update(
            status=Enrollment.STATUS_IN_PROGRESS,
            completed_date=None,
            progress_percentage=0,
            updated_at=timezone.now(),
        )

        record_audit(
            'training_record.denied',
            'training_record',
            record_id,
            organization_id=record.organization_id,
            actor=denied_by,
            details=details,
            request=request,
        )

    logger.info(f'Training record {record_id} denied; enrollment {enrollment_id} reset')
    return {'success': True, 'message': 'Training record denied and reset'}


def pending_approvals(organization_id, location_id):
    return (
        TrainingRecord.objects
        .filter(organization_id=organization_id, location_id=location_id, approval_status=TrainingRecord.APPROVAL_PENDING)
        .select_related('user', 'course')
        .order_by('-completion_date')
    )


def approved_records(organization_id, location_id):
    return (
        TrainingRecord.objects
        .filter(organization_id=organization_id, location_id=location_id, approval_status=TrainingRecord.APPROVAL_APPROVED)
        .select_related('user', 'course', 'supervisor')
        .order_by('-completion_date')
    )
