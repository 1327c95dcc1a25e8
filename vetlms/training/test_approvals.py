from django.test import TestCase

from accounts.factories import make_location, make_organization, make_profile
from courses.factories import correct_answers, make_course
from training.exceptions import ApprovalStateError, SignatureValidationError, TrainingRecordNotFound
from training.models import AuditLog, Enrollment, QuizAttempt, TrainingRecord
from training.services import approvals
from training.services.records import create_training_record


class ApprovalWorkflowTest(TestCase):

    def setUp(self):
        self.org = make_organization()
        self.location = make_location(self.org)
        self.admin = make_profile(self.location, 'clinic_admin', role='admin')
        self.employee = make_profile(self.location, 'vet_tech')
        self.course = make_course(self.location)
        self.enrollment = Enrollment.objects.create(user=self.employee, course=self.course)
        self.record = create_training_record(
            self.employee, self.course.pk, self.enrollment.pk, 100, 80, 'Vet Tech', 3, answers=correct_answers(4),
        )

    def test_approve_stamps_supervisor(self):
        record = approvals.approve_training_record(self.record.pk, self.admin, ' Clinic Admin ', self.location.pk)
        self.assertEqual(record.approval_status, TrainingRecord.APPROVAL_APPROVED)
        self.assertEqual(record.supervisor, self.admin)
        self.assertEqual(record.supervisor_signature_data, 'Clinic Admin')
        self.assertIsNotNone(record.supervisor_signature_date)
        self.assertTrue(AuditLog.objects.filter(action_type='training_record.approved', entity_id=str(record.pk)).exists())

    def test_approving_again_restamps(self):
        first = approvals.approve_training_record(self.record.pk, self.admin, 'Clinic Admin', self.location.pk)
        other_admin = make_profile(self.location, 'night_admin', role='admin')
        second = approvals.approve_training_record(self.record.pk, other_admin, 'Night Admin', self.location.pk)
        self.assertEqual(second.supervisor, other_admin)
        self.assertGreaterEqual(second.supervisor_signature_date, first.supervisor_signature_date)

    def test_supervisor_signature_required(self):
        with self.assertRaises(SignatureValidationError):
            approvals.approve_training_record(self.record.pk, self.admin, '  ', self.location.pk)
        self.record.refresh_from_db()
        self.assertFalse(self.record.is_approved)

    def test_deny_reverses_the_completion(self):
        attempt_id = self.record.quiz_attempt_id
        result = approvals.deny_training_record(self.record.pk, self.location.pk, reason='Signature unreadable',
                                                denied_by=self.admin)
        self.assertEqual(result, {'success': True, 'message': 'Training record denied and reset'})

        self.assertFalse(TrainingRecord.objects.filter(pk=self.record.pk).exists())
        self.assertFalse(QuizAttempt.objects.filter(pk=attempt_id).exists())
        self.enrollment.refresh_from_db()
        self.assertEqual(self.enrollment.status, Enrollment.STATUS_IN_PROGRESS)
        self.assertIsNone(self.enrollment.completed_date)
        self.assertEqual(self.enrollment.progress_percentage, 0)
        # the learner's submission count survives the reset
        self.assertEqual(self.enrollment.attempt_count, 1)

        audit = AuditLog.objects.get(action_type='training_record.denied')
        self.assertEqual(audit.entity_id, str(self.record.pk))
        self.assertEqual(audit.actor, self.admin)
        self.assertEqual(audit.details['reason'], 'Signature unreadable')
        self.assertEqual(audit.details['quiz_score'], 100)

    def test_denied_training_can_be_completed_again(self):
        approvals.deny_training_record(self.record.pk, self.location.pk)
        record = create_training_record(
            self.employee, self.course.pk, self.enrollment.pk, 100, 80, 'Vet Tech', 3, answers=correct_answers(4),
        )
        self.assertEqual(record.quiz_attempt.attempt_number, 2)

    def test_approved_record_cannot_be_denied(self):
        approvals.approve_training_record(self.record.pk, self.admin, 'Clinic Admin', self.location.pk)
        with self.assertRaises(ApprovalStateError):
            approvals.deny_training_record(self.record.pk, self.location.pk)
        self.assertTrue(TrainingRecord.objects.filter(pk=self.record.pk).exists())

    def test_other_location_changes_nothing(self):
        uptown = make_location(self.org, name='Uptown Clinic')
        with self.assertRaises(TrainingRecordNotFound):
            approvals.deny_training_record(self.record.pk, uptown.pk)
        with self.assertRaises(TrainingRecordNotFound):
            approvals.approve_training_record(self.record.pk, self.admin, 'Clinic Admin', uptown.pk)
        self.record.refresh_from_db()
        self.assertEqual(self.record.approval_status, TrainingRecord.APPROVAL_PENDING)
        self.enrollment.refresh_from_db()
        self.assertEqual(self.enrollment.status, Enrollment.STATUS_COMPLETED)

    def test_listings(self):
        self.assertEqual(list(approvals.pending_approvals(self.org.pk, self.location.pk)), [self.record])
        self.assertEqual(list(approvals.approved_records(self.org.pk, self.location.pk)), [])
        approvals.approve_training_record(self.record.pk, self.admin, 'Clinic Admin', self.location.pk)
        self.assertEqual(list(approvals.pending_approvals(self.org.pk, self.location.pk)), [])
        self.assertEqual(list(approvals.approved_records(self.org.pk, self.location.pk)), [self.record])
