from django.contrib import admin
from .models import Enrollment, QuizAttempt, TrainingRecord, AuditLog


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('user', 'course', 'status', 'progress_percentage', 'attempt_count', 'deadline', 'completed_date')
    list_filter = ('status',)
    search_fields = ('user__full_name', 'course__title')


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ('user', 'course', 'attempt_number', 'percentage', 'passed', 'created_at')
    list_filter = ('passed',)


@admin.register(TrainingRecord)
class TrainingRecordAdmin(admin.ModelAdmin):
    list_display = ('user', 'course', 'quiz_score', 'approval_status', 'supervisor', 'completion_date')
    list_filter = ('approval_status', 'location')
    search_fields = ('user__full_name', 'course__title')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('action_type', 'entity_type', 'entity_id', 'actor', 'created_at')
    list_filter = ('action_type', 'entity_type')
    readonly_fields = [f.name for f in AuditLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
