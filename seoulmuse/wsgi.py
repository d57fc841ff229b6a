"""
WSGI config for the Seoul Muse project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'seoulmuse.settings')

application = get_wsgi_application()
