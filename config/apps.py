"""Custom Django admin app configuration."""

from django.contrib.admin.apps import AdminConfig


class StatusTrackerAdminConfig(AdminConfig):
    default_site = "config.admin.StatusTrackerAdminSite"
