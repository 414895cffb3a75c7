"""Celery application bootstrap for the status tracker.

Background work handled here:
- the polling fallback cycle (apps.incidents.tasks.poll_providers)
- component registry refreshes and provider health checks
- notification delivery (apps.notify.tasks.deliver_notification)

Run a worker and the beat scheduler with something like:
- celery -A config worker -l info
- celery -A config beat -l info

Broker/result backend and the beat schedule come from Django settings
(see config/settings.py, CELERY_* namespace).
"""

from __future__ import annotations

import os

from celery import Celery

from config.env import load_env

load_env()

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("status-tracker")

app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
