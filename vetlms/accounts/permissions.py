"""
Accounts permissions - role and tenant checks shared by the course and training APIs
"""
from rest_framework import permissions
from .models import Profile


def get_profile(request):
    """Return the caller's Profile, or None for users without one."""
    user = getattr(request, 'user', None)
    if not user or not user.is_authenticated:
        return None
    try:
        return user.profile
    except Profile.DoesNotExist:
        return None


class HasProfile(permissions.BasePermission):
    """Caller must be authenticated and belong to an organization location"""
    message = 'A staff profile is required.'

    def has_permission(self, request, view):
        profile = get_profile(request)
        return profile is not None and profile.is_active


class IsElevatedRole(permissions.BasePermission):
    """Only global admins and location admins"""
    message = 'Forbidden'

    def has_permission(self, request, view):
        profile = get_profile(request)
        return profile is not None and profile.is_active and profile.is_elevated


class IsElevatedOrReadOnly(permissions.BasePermission):
    """Elevated roles can edit, other staff can only read"""
    message = 'Forbidden'

    def has_permission(self, request, view):
        profile = get_profile(request)
        if profile is None or not profile.is_active:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return profile.is_elevated


class IsSameOrganization(permissions.BasePermission):
    """
    Object-level tenant check.
    Global admins see every location of their organization, everybody else only their own location.
    """
    def has_object_permission(self, request, view, obj):
        profile = get_profile(request)
        if profile is None:
            return False
        if obj.organization_id != profile.organization_id:
            return False
        if profile.is_global_admin:
            return True
        return obj.location_id == profile.location_id
