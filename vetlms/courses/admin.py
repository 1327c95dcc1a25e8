from django.contrib import admin
from .models import Course


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('title', 'content_type', 'location', 'is_published', 'is_active', 'is_mandatory', 'created_at')
    list_filter = ('content_type', 'is_published', 'is_active', 'organization', 'location')
    search_fields = ('title', 'category')
