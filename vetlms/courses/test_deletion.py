"""
Cascading course deletion against the real schema
"""
from unittest import mock
import uuid

from django.db import DatabaseError, connection
from django.test import TestCase

from accounts.factories import make_location, make_organization, make_profile
from courses.exceptions import CourseNotFound
from courses.factories import make_course
from courses.models import Course
from courses.services import deletion
from courses.services.deletion import delete_course, fetch_foreign_keys, referencing_columns
from training.models import AuditLog, Enrollment, QuizAttempt, TrainingRecord


class CourseDeletionTest(TestCase):

    def setUp(self):
        self.org = make_organization()
        self.location = make_location(self.org)
        self.other_location = make_location(self.org, name='Uptown Clinic')
        self.admin = make_profile(self.location, 'clinic_admin', role='admin')
        self.learners = [make_profile(self.location, f'learner_{i}') for i in range(2)]

        self.course = make_course(self.location, created_by=self.admin)
        self.kept_course = make_course(self.location, title='Dog Bite Prevention')

        for course in (self.course, self.kept_course):
            for learner in self.learners:
                self._complete(course, learner)

    def _complete(self, course, learner):
        enrollment = Enrollment.objects.create(user=learner, course=course, status='completed', progress_percentage=100)
        attempt = QuizAttempt.objects.create(
            user=learner, course=course, quiz_version='v1', answers=[0, 1, 2, 3],
            score=4, percentage=100, passed=True,
        )
        TrainingRecord.objects.create(
            organization=self.org, location=self.location, user=learner, course=course,
            enrollment=enrollment, quiz_attempt=attempt, quiz_score=100,
            employee_signature_data=learner.full_name,
        )

    def _dependent_counts(self, course):
        return (
            Enrollment.objects.filter(course=course).count(),
            QuizAttempt.objects.filter(course=course).count(),
            TrainingRecord.objects.filter(course=course).count(),
        )

    def test_discovers_every_table_referencing_courses(self):
        with connection.cursor() as cursor:
            columns = referencing_columns(fetch_foreign_keys(cursor), 'courses', 'id')
        self.assertEqual(columns['enrollments'], ['course_id'])
        self.assertEqual(columns['quiz_attempts'], ['course_id'])
        self.assertEqual(columns['training_records'], ['course_id'])
        self.assertNotIn('audit_logs', columns)

    def test_deletes_course_and_all_dependents(self):
        result = delete_course(self.course.pk, organization_id=self.org.pk, location_id=self.location.pk, actor=self.admin)

        self.assertEqual(result['id'], str(self.course.pk))
        self.assertEqual(result['title'], 'Safe Handling of Cats')
        self.assertEqual(result['deleted_rows']['enrollments'], 2)
        self.assertEqual(result['deleted_rows']['quiz_attempts'], 2)
        self.assertEqual(result['deleted_rows']['training_records'], 2)
        self.assertEqual(result['deleted_rows']['courses'], 1)

        self.assertFalse(Course.objects.filter(pk=self.course.pk).exists())
        self.assertEqual(self._dependent_counts(self.course), (0, 0, 0))
        # other courses are untouched
        self.assertEqual(self._dependent_counts(self.kept_course), (2, 2, 2))

    def test_deletion_is_audited(self):
        delete_course(self.course.pk, organization_id=self.org.pk, actor=self.admin)
        entry = AuditLog.objects.get(action_type='course.deleted')
        self.assertEqual(entry.entity_id, str(self.course.pk))
        self.assertEqual(entry.actor, self.admin)
        self.assertEqual(entry.details['title'], 'Safe Handling of Cats')

    def test_other_organization_cannot_delete(self):
        other_org = make_organization('Other Vets')
        with self.assertRaises(CourseNotFound):
            delete_course(self.course.pk, organization_id=other_org.pk)
        self.assertTrue(Course.objects.filter(pk=self.course.pk).exists())
        self.assertEqual(self._dependent_counts(self.course), (2, 2, 2))

    def test_other_location_cannot_delete(self):
        with self.assertRaises(CourseNotFound):
            delete_course(self.course.pk, organization_id=self.org.pk, location_id=self.other_location.pk)
        self.assertTrue(Course.objects.filter(pk=self.course.pk).exists())
        self.assertEqual(self._dependent_counts(self.course), (2, 2, 2))

    def test_unknown_or_malformed_id(self):
        with self.assertRaises(CourseNotFound):
            delete_course(uuid.uuid4(), organization_id=self.org.pk)
        with self.assertRaises(CourseNotFound):
            delete_course('not-a-uuid', organization_id=self.org.pk)

    def test_failure_part_way_rolls_everything_back(self):
        real_delete = deletion._delete_dependent_rows
        calls = []

        def fail_on_second_table(cursor, table, columns, key):
            calls.append(table)
            if len(calls) == 2:
                raise DatabaseError('simulated failure')
            return real_delete(cursor, table, columns, key)

        with mock.patch.object(deletion, '_delete_dependent_rows', side_effect=fail_on_second_table):
            with self.assertRaises(DatabaseError):
                delete_course(self.course.pk, organization_id=self.org.pk)

        self.assertEqual(len(calls), 2)
        self.assertTrue(Course.objects.filter(pk=self.course.pk).exists())
        self.assertEqual(self._dependent_counts(self.course), (2, 2, 2))
        self.assertFalse(AuditLog.objects.filter(action_type='course.deleted').exists())

    def test_records_are_cleared_before_what_they_reference(self):
        real_delete = deletion._delete_dependent_rows
        order = []

        def track(cursor, table, columns, key):
            order.append(table)
            return real_delete(cursor, table, columns, key)

        with mock.patch.object(deletion, '_delete_dependent_rows', side_effect=track):
            delete_course(self.course.pk, organization_id=self.org.pk)

        self.assertLess(order.index('training_records'), order.index('enrollments'))
        self.assertLess(order.index('training_records'), order.index('quiz_attempts'))
