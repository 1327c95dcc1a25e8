"""
Course targeting: which profiles a course applies to, and enrollment creation.
"""
import logging

from django.db import transaction

from accounts.models import Profile

logger = logging.getLogger(__name__)


def _normalized(values):
    return {str(v).strip().lower() for v in (values or []) if str(v).strip()}


def _norm(value):
    return (value or '').strip().lower()


def should_assign_course(course, profile):
    """
    Decide whether a course targets a profile.

    Exception positions always win, then entire-company courses match everyone.
    With both department and position scopes a match on either is enough; with
    one scope it must match; with no scope the course applies to everyone.
    """
    position = _norm(profile.job_title)
    department = _norm(profile.department)

    if position and position in _normalized(course.exception_positions):
        return False
    if course.assign_to_entire_company:
        return True

    departments = _normalized(course.assigned_departments)
    positions = _normalized(course.assigned_positions)

    if departments and positions:
        return department in departments or position in positions
    if departments:
        return department in departments
    if positions:
        return position in positions
    return True


def assign_course(course, assigned_by=None, deadline=None):
    """
    Create `assigned` enrollments for every active profile the course targets.

    Only published, active courses are assigned. Profiles are taken from the
    course's organization and location; existing enrollments are left alone.

    Returns:
        list of the newly created Enrollment rows
    """
    from training.models import Enrollment

    if not (course.is_published and course.is_active):
        logger.info(f'Course {course.pk} is not published/active; nothing assigned')
        return []

    candidates = Profile.objects.filter(
        organization_id=course.organization_id,
        location_id=course.location_id,
        is_active=True,
    )

    created = []
    with transaction.atomic():
        for profile in candidates:
            if not should_assign_course(course, profile):
                continue
            defaults = {'status': Enrollment.STATUS_ASSIGNED, 'deadline': deadline}
            if assigned_by is not None:
                defaults['assigned_by'] = assigned_by
            enrollment, was_created = Enrollment.objects.get_or_create(
                course=course,
                user=profile,
                defaults=defaults,
            )
            if was_created:
                created.append(enrollment)

    logger.info(f'Course {course.pk} assigned to {len(created)} new learners')
    return created
