"""Admin configuration for incidents models."""

from django.contrib import admin
from django.utils.html import format_html, format_html_join
from django_object_actions import DjangoObjectActions
from django_object_actions import action as object_action

from apps.incidents.events import CanonicalEvent
from apps.incidents.models import (
    Component,
    IncidentLog,
    IncidentStatus,
    PollingFallback,
    StatusChangeLog,
)
from apps.incidents.polling import FallbackController
from apps.incidents.services import IncidentLifecycleManager, IncidentQueryService
from config.admin import prettify_json

BADGE_HTML = (
    '<span style="background-color: {}; color: white; padding: 3px 8px; '
    'border-radius: 3px; font-size: 11px;">{}</span>'
)

SEVERITY_COLORS = {
    "critical": "#dc3545",
    "major": "#fd7e14",
    "minor": "#ffc107",
    "maintenance": "#17a2b8",
    "resolved": "#28a745",
}

STATUS_COLORS = {
    "investigating": "#dc3545",
    "identified": "#fd7e14",
    "monitoring": "#17a2b8",
    "degraded": "#ffc107",
    "resolved": "#28a745",
    "operational": "#28a745",
}

COMPONENT_COLORS = {
    "operational": "#28a745",
    "degraded_performance": "#ffc107",
    "partial_outage": "#fd7e14",
    "major_outage": "#dc3545",
    "under_maintenance": "#17a2b8",
}


def _badge(colors: dict, value: str):
    return format_html(BADGE_HTML, colors.get(value, "#6c757d"), (value or "-").upper())


@admin.register(IncidentLog)
class IncidentLogAdmin(DjangoObjectActions, admin.ModelAdmin):
    """Admin for IncidentLog model."""

    list_display = [
        "service_name",
        "provider",
        "severity_badge",
        "status_badge",
        "updated_at",
        "resolved_at",
    ]
    list_filter = ["provider", "status", "severity"]
    search_fields = ["service_name", "incident_id", "status_message"]
    readonly_fields = [
        "incident_id",
        "provider",
        "content_fingerprint",
        "created_at",
        "updated_at",
        "resolved_at",
        "observed_at",
        "pretty_affected_components",
        "history_display",
    ]
    date_hierarchy = "updated_at"
    change_actions = ["resolve_incident"]

    fieldsets = [
        (
            "Identification",
            {
                "fields": ["incident_id", "provider", "service_name", "incident_url"],
            },
        ),
        (
            "Status",
            {
                "fields": ["status", "severity", "status_message"],
            },
        ),
        (
            "Details",
            {
                "fields": ["pretty_affected_components", "content_fingerprint"],
                "classes": ["collapse"],
            },
        ),
        (
            "History",
            {
                "fields": ["history_display"],
            },
        ),
        (
            "Timestamps",
            {
                "fields": ["created_at", "updated_at", "resolved_at", "observed_at"],
            },
        ),
    ]

    @object_action(label="Resolve", description="Record a resolved status for this incident")
    def resolve_incident(self, request, obj):
        if obj.is_resolved:
            self.message_user(request, "Already resolved.", level="warning")
            return

        event = CanonicalEvent(
            provider=obj.provider,
            service_id=obj.incident_id,
            product_name=obj.service_name,
            status=IncidentStatus.RESOLVED,
            message=f"Resolved manually by {request.user}",
            severity=obj.severity,
            url=obj.incident_url,
        )
        IncidentLifecycleManager().apply(event)
        self.message_user(request, f"Incident '{obj.service_name}' resolved.")

    @admin.display(description="Severity")
    def severity_badge(self, obj):
        return _badge(SEVERITY_COLORS, obj.severity)

    @admin.display(description="Status")
    def status_badge(self, obj):
        return _badge(STATUS_COLORS, obj.status)

    @admin.display(description="Affected components")
    def pretty_affected_components(self, obj):
        return prettify_json(obj.affected_components)

    @admin.display(description="Status history")
    def history_display(self, obj):
        entries = IncidentQueryService().status_history(obj.incident_id, provider=obj.provider)
        if not entries:
            return "-"
        return format_html(
            "<ul>{}</ul>",
            format_html_join(
                "",
                "<li>{}: {} &rarr; {}</li>",
                (
                    (
                        entry.changed_at.strftime("%Y-%m-%d %H:%M:%S"),
                        entry.previous_status,
                        entry.current_status,
                    )
                    for entry in entries
                ),
            ),
        )


@admin.register(StatusChangeLog)
class StatusChangeLogAdmin(admin.ModelAdmin):
    """Admin for StatusChangeLog model."""

    list_display = [
        "service_name",
        "provider",
        "previous_status",
        "current_status",
        "changed_at",
    ]
    list_filter = ["provider", "current_status"]
    search_fields = ["service_id", "service_name"]
    readonly_fields = [
        "service_id",
        "service_name",
        "provider",
        "previous_status",
        "current_status",
        "changed_at",
    ]
    date_hierarchy = "changed_at"

    def has_add_permission(self, request):
        """Audit rows are written by the lifecycle manager only."""
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Component)
class ComponentAdmin(admin.ModelAdmin):
    """Admin for Component model."""

    list_display = [
        "name",
        "provider",
        "status_badge",
        "position",
        "last_checked_at",
        "version",
    ]
    list_filter = ["provider", "current_status"]
    search_fields = ["name", "component_id", "description"]
    readonly_fields = ["version", "created_at", "updated_at", "last_checked_at"]

    @admin.display(description="Status")
    def status_badge(self, obj):
        return _badge(COMPONENT_COLORS, obj.current_status)


@admin.register(PollingFallback)
class PollingFallbackAdmin(DjangoObjectActions, admin.ModelAdmin):
    """Admin for the per-provider polling fallback switch."""

    list_display = ["provider", "enabled_badge", "reason", "updated_at"]
    list_filter = ["enabled"]
    readonly_fields = ["updated_at"]
    actions = ["enable_selected", "disable_selected"]
    change_actions = ["enable_polling", "disable_polling"]

    @admin.action(description="Enable polling for selected providers")
    def enable_selected(self, request, queryset):
        controller = FallbackController()
        for row in queryset:
            controller.enable(row.provider, f"enabled by {request.user}")
        self.message_user(request, f"Polling enabled for {queryset.count()} provider(s).")

    @admin.action(description="Disable polling for selected providers")
    def disable_selected(self, request, queryset):
        controller = FallbackController()
        for row in queryset:
            controller.disable(row.provider, f"disabled by {request.user}")
        self.message_user(request, f"Polling disabled for {queryset.count()} provider(s).")

    @object_action(label="Enable polling", description="Start polling this provider")
    def enable_polling(self, request, obj):
        FallbackController().enable(obj.provider, f"enabled by {request.user}")
        self.message_user(request, f"Polling enabled for {obj.provider}.")

    @object_action(label="Disable polling", description="Stop polling this provider")
    def disable_polling(self, request, obj):
        FallbackController().disable(obj.provider, f"disabled by {request.user}")
        self.message_user(request, f"Polling disabled for {obj.provider}.")

    @admin.display(description="Polling")
    def enabled_badge(self, obj):
        return _badge({"ON": "#28a745", "OFF": "#6c757d"}, "ON" if obj.enabled else "OFF")
