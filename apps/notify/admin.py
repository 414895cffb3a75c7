"""Admin configuration for notify models."""

from django.contrib import admin
from django.db import models as db_models
from django_json_widget.widgets import JSONEditorWidget
from django_object_actions import DjangoObjectActions
from django_object_actions import action as object_action

from apps.notify.models import NotificationChannel
from apps.notify.services import send_test_notification


@admin.register(NotificationChannel)
class NotificationChannelAdmin(DjangoObjectActions, admin.ModelAdmin):
    """Admin for NotificationChannel model."""

    list_display = [
        "name",
        "driver",
        "is_active",
        "kinds",
        "created_at",
        "updated_at",
    ]
    formfield_overrides = {db_models.JSONField: {"widget": JSONEditorWidget}}
    list_filter = ["driver", "is_active"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at", "updated_at"]
    change_actions = ["send_test"]

    fieldsets = [
        (
            None,
            {
                "fields": ["name", "driver", "is_active", "description"],
            },
        ),
        (
            "Configuration",
            {
                "fields": ["config", "kinds"],
                "classes": ["collapse"],
            },
        ),
        (
            "Timestamps",
            {
                "fields": ["created_at", "updated_at"],
                "classes": ["collapse"],
            },
        ),
    ]

    @object_action(label="Send test", description="Send a test notification through this channel")
    def send_test(self, request, obj):
        result = send_test_notification(obj)
        if result.get("success"):
            self.message_user(request, f"Test notification sent via '{obj.name}'.")
        else:
            self.message_user(
                request,
                f"Test notification failed: {result.get('error', 'unknown error')}",
                level="error",
            )
