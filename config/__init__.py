"""Django project package for the status tracker."""

from config.celery import app as celery_app

__all__ = ["celery_app"]
