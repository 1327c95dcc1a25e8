"""
WSGI config for vetlms project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vetlms.settings')

application = get_wsgi_application()
