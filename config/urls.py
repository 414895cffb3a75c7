"""
URL configuration for the status tracker project.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("apps.incidents.urls")),
]
