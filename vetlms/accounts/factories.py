"""
Object builders shared by the test suites
"""
from django.contrib.auth import get_user_model

from .models import Organization, Location, Profile


def make_organization(name='Happy Paws', slug=None):
    return Organization.objects.create(name=name, slug=slug or name.lower().replace(' ', '-'))


def make_location(organization, name='Downtown Clinic', code=''):
    return Location.objects.create(organization=organization, name=name, code=code)


def make_profile(location, username, role=Profile.ROLE_EMPLOYEE, password='Passw0rd!', **fields):
    user = get_user_model().objects.create_user(username=username, password=password, email=f'{username}@example.com')
    fields.setdefault('full_name', username.replace('_', ' ').title())
    fields.setdefault('email', user.email)
    return Profile.objects.create(
        user=user,
        organization=location.organization,
        location=location,
        role=role,
        **fields
    )
