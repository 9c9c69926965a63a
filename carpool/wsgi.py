"""
WSGI config for carpool project.
"""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'carpool.settings')

application = get_wsgi_application()
