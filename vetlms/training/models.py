"""
Training models - enrollments, quiz attempts, signed training records and the audit trail
"""
from django.db import models
from django.utils import timezone
import uuid

from accounts.models import Organization, Location, Profile
from courses.models import Course


class Enrollment(models.Model):
    """Maps to the `enrollments` table - a course assigned to one person"""
    STATUS_ASSIGNED = 'assigned'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'

    STATUS_CHOICES = [
        (STATUS_ASSIGNED, 'Assigned'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='enrollments', db_column='user_id')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollments', db_column='course_id')
    assigned_by = models.ForeignKey(Profile, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_enrollments', db_column='assigned_by')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ASSIGNED)
    progress_percentage = models.PositiveSmallIntegerField(default=0)
    deadline = models.DateTimeField(null=True, blank=True)
    started_date = models.DateTimeField(null=True, blank=True)
    completed_date = models.DateTimeField(null=True, blank=True)
    # submitted completions; denial resets the enrollment but never this counter
    attempt_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'enrollments'
        ordering = ['-created_at']
        unique_together = [('user', 'course')]

    def __str__(self):
        return f"{self.user} - {self.course} ({self.status})"

    @property
    def is_completed(self):
        return self.status == self.STATUS_COMPLETED


class QuizAttempt(models.Model):
    """Maps to the `quiz_attempts` table"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='quiz_attempts', db_column='user_id')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='quiz_attempts', db_column='course_id')
    quiz_version = models.CharField(max_length=64)
    answers = models.JSONField(default=list)
    score = models.PositiveSmallIntegerField()
    percentage = models.PositiveSmallIntegerField()
    passed = models.BooleanField(default=False)
    attempt_number = models.PositiveIntegerField(default=1)
    time_taken_seconds = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'quiz_attempts'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} - {self.course} attempt {self.attempt_number}: {self.percentage}%"


class TrainingRecord(models.Model):
    """Maps to the `training_records` table - the signed evidence of a completed course"""
    APPROVAL_PENDING = 'pending_review'
    APPROVAL_APPROVED = 'approved'

    APPROVAL_CHOICES = [
        (APPROVAL_PENDING, 'Pending Review'),
        (APPROVAL_APPROVED, 'Approved'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='training_records', db_column='organization_id')
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='training_records', db_column='location_id')
    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='training_records', db_column='user_id')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='training_records', db_column='course_id')
    enrollment = models.ForeignKey(Enrollment, on_delete=models.CASCADE, related_name='training_records', db_column='enrollment_id')
    quiz_attempt = models.ForeignKey(QuizAttempt, on_delete=models.SET_NULL, null=True, blank=True, related_name='training_records', db_column='quiz_attempt_id')
    completion_date = models.DateTimeField(default=timezone.now)
    quiz_score = models.PositiveSmallIntegerField()
    employee_signature_data = models.TextField()
    employee_signature_date = models.DateTimeField(default=timezone.now)
    supervisor = models.ForeignKey(Profile, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_training_records', db_column='supervisor_id')
    supervisor_signature_data = models.TextField(null=True, blank=True)
    supervisor_signature_date = models.DateTimeField(null=True, blank=True)
    approval_status = models.CharField(max_length=20, choices=APPROVAL_CHOICES, default=APPROVAL_PENDING)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'training_records'
        ordering = ['-completion_date']

    def __str__(self):
        return f"{self.user} - {self.course} ({self.approval_status})"

    @property
    def is_approved(self):
        return self.approval_status == self.APPROVAL_APPROVED


class AuditLog(models.Model):
    """Maps to the `audit_logs` table. entity_id is plain text so entries outlive the rows they describe."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs', db_column='organization_id')
    actor = models.ForeignKey(Profile, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_logs', db_column='user_id')
    action_type = models.CharField(max_length=100)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64, blank=True, default='')
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.CharField(max_length=64, null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action_type} {self.entity_type}:{self.entity_id}"
