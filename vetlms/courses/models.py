"""
Course models - training content, targeting rules and the embedded quiz
"""
from django.db import models
from django.utils import timezone
import uuid

from accounts.models import Organization, Location, Profile
from .quiz import Quiz


class Course(models.Model):
    """Maps to the `courses` table"""

    CONTENT_VIDEO = 'video'
    CONTENT_PDF = 'pdf'
    CONTENT_POWERPOINT = 'powerpoint'
    CONTENT_SCORM = 'scorm'
    CONTENT_OTHER = 'other'

    CONTENT_TYPE_CHOICES = [
        (CONTENT_VIDEO, 'Video'),
        (CONTENT_PDF, 'PDF'),
        (CONTENT_POWERPOINT, 'PowerPoint'),
        (CONTENT_SCORM, 'SCORM'),
        (CONTENT_OTHER, 'Other'),
    ]
    # Published courses of these types must ship content in every language
    LOCALIZED_CONTENT_TYPES = (CONTENT_VIDEO, CONTENT_PDF, CONTENT_POWERPOINT)
    CONTENT_LANGUAGES = ('en', 'es', 'ne')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='courses', db_column='organization_id')
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='courses', db_column='location_id')
    title = models.CharField(max_length=500)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100, blank=True, null=True)
    content_type = models.CharField(max_length=20, choices=CONTENT_TYPE_CHOICES, default=CONTENT_VIDEO)
    content_url = models.CharField(max_length=500, blank=True, null=True)
    content_url_en = models.CharField(max_length=500, blank=True, null=True)
    content_url_es = models.CharField(max_length=500, blank=True, null=True)
    content_url_ne = models.CharField(max_length=500, blank=True, null=True)
    duration_minutes = models.PositiveIntegerField(blank=True, null=True)
    pass_percentage = models.PositiveSmallIntegerField(default=80)
    is_mandatory = models.BooleanField(default=False)
    is_published = models.BooleanField(default=False)

    # Targeting rules
    assigned_departments = models.JSONField(default=list, blank=True)
    assigned_positions = models.JSONField(default=list, blank=True)
    assign_to_entire_company = models.BooleanField(default=False)
    exception_positions = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)
    quiz_questions = models.JSONField(default=list, blank=True)

    created_by = models.ForeignKey(Profile, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_courses', db_column='created_by')
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'courses'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def quiz(self):
        return Quiz.from_course(self)

    def content_url_for(self, language):
        """Content URL for a language, falling back to English and then the legacy single URL"""
        if language in self.CONTENT_LANGUAGES:
            url = getattr(self, f'content_url_{language}')
            if url:
                return url
        return self.content_url_en or self.content_url

    def missing_content_languages(self):
        return [lang for lang in self.CONTENT_LANGUAGES if not getattr(self, f'content_url_{lang}')]
