"""
Accounts models - organizations, their physical locations and the people who train there
"""
from django.conf import settings
from django.db import models
from django.utils import timezone
import uuid


class Organization(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'organizations'
        ordering = ['name']

    def __str__(self):
        return self.name


class Location(models.Model):
    """A clinic or facility of an organization; training records are kept per location"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='locations', db_column='organization_id')
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=20, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'locations'
        ordering = ['organization', 'name']

    def __str__(self):
        return f"{self.name} ({self.organization.name})"


class Profile(models.Model):
    """Maps to the `users` table - one learner, supervisor or administrator"""
    ROLE_GLOBAL_ADMIN = 'global_admin'
    ROLE_ADMIN = 'admin'
    ROLE_MANAGER = 'manager'
    ROLE_SUPERVISOR = 'supervisor'
    ROLE_EMPLOYEE = 'employee'

    ROLE_CHOICES = [
        (ROLE_GLOBAL_ADMIN, 'Global Admin'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_MANAGER, 'Manager'),
        (ROLE_SUPERVISOR, 'Supervisor'),
        (ROLE_EMPLOYEE, 'Employee'),
    ]
    ELEVATED_ROLES = (ROLE_GLOBAL_ADMIN, ROLE_ADMIN)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile')
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='members', db_column='organization_id')
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='members', db_column='location_id')
    employee_id = models.CharField(max_length=20, blank=True, default='')
    full_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    department = models.CharField(max_length=100, blank=True, null=True)
    job_title = models.CharField(max_length=100, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_EMPLOYEE)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        ordering = ['full_name']

    @property
    def is_elevated(self):
        return self.role in self.ELEVATED_ROLES

    @property
    def is_global_admin(self):
        return self.role == self.ROLE_GLOBAL_ADMIN

    def __str__(self):
        return self.full_name or str(self.user)
