"""
WSGI config for storefront_api.

Exposes the WSGI callable as ``application``; point gunicorn (or the host's
WSGI configuration) at ``storefront_api.wsgi:application`` with the directory
containing manage.py on the path.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "storefront_api.settings")

application = get_wsgi_application()
