from django.core.management.base import BaseCommand, CommandError

from courses.models import Course
from courses.services.assignment import assign_course


class Command(BaseCommand):
    help = 'Create enrollments for published courses according to their targeting rules'

    def add_arguments(self, parser):
        parser.add_argument('course_ids', nargs='*', help='Limit to these course ids (default: every published, active course)')
        parser.add_argument('--dry-run', action='store_true', help='Only report how many courses would be processed')

    def handle(self, *args, **options):
        qs = Course.objects.filter(is_published=True, is_active=True)
        if options['course_ids']:
            qs = qs.filter(pk__in=options['course_ids'])
            if not qs.exists():
                raise CommandError('No published, active course matches the given ids')

        if options['dry_run']:
            self.stdout.write(f"{qs.count()} course(s) would be assigned")
            return

        total = 0
        for course in qs:
            created = assign_course(course)
            total += len(created)
            self.stdout.write(f"{course.title}: {len(created)} new enrollment(s)")

        self.stdout.write(self.style.SUCCESS(f"Created {total} enrollment(s)"))
