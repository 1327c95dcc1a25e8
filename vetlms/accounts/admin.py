from django.contrib import admin
from .models import Organization, Location, Profile


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'is_active', 'created_at')
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'organization', 'is_active')
    list_filter = ('organization',)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'employee_id', 'role', 'department', 'job_title', 'location')
    list_filter = ('role', 'organization', 'location')
    search_fields = ('full_name', 'email', 'employee_id')
