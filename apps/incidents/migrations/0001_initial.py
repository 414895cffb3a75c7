import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="IncidentLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("incident_id", models.CharField(help_text="Provider-scoped identifier of the incident or component.", max_length=255)),
                ("provider", models.CharField(db_index=True, help_text="Registered provider name (lower-case).", max_length=100)),
                ("service_name", models.CharField(blank=True, default="", help_text="Display name of the incident or component.", max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("investigating", "Investigating"),
                            ("identified", "Identified"),
                            ("monitoring", "Monitoring"),
                            ("resolved", "Resolved"),
                            ("degraded", "Degraded"),
                            ("operational", "Operational"),
                        ],
                        db_index=True,
                        default="investigating",
                        max_length=20,
                    ),
                ),
                ("status_message", models.TextField(blank=True, default="", help_text="Most recent update message.")),
                (
                    "severity",
                    models.CharField(
                        choices=[
                            ("critical", "Critical"),
                            ("major", "Major"),
                            ("minor", "Minor"),
                            ("maintenance", "Maintenance"),
                            ("resolved", "Resolved"),
                            ("unknown", "Unknown"),
                        ],
                        default="unknown",
                        max_length=20,
                    ),
                ),
                ("incident_url", models.URLField(blank=True, default="", max_length=500)),
                ("affected_components", models.JSONField(blank=True, default=list, help_text="Names of affected components (informational).")),
                ("content_fingerprint", models.CharField(blank=True, default="", help_text="SHA-256 of incident_id|status|message, kept for diagnostics.", max_length=64)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("observed_at", models.DateTimeField(blank=True, help_text="When the provider asserted the latest accepted update.", null=True)),
            ],
            options={
                "db_table": "incident_logs",
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(fields=["provider", "created_at"], name="incident_lo_provide_5b0c1e_idx"),
                    models.Index(fields=["service_name", "status"], name="incident_lo_service_8d2a4f_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("incident_id", "provider"), name="uniq_incident_per_provider"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StatusChangeLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("service_id", models.CharField(max_length=255)),
                ("service_name", models.CharField(blank=True, default="", max_length=255)),
                ("previous_status", models.CharField(blank=True, default="", max_length=20)),
                ("current_status", models.CharField(max_length=20)),
                ("provider", models.CharField(db_index=True, max_length=100)),
                ("changed_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "status_change_logs",
                "ordering": ["-changed_at"],
                "indexes": [
                    models.Index(fields=["service_id", "changed_at"], name="status_chan_service_3e7f90_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Component",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("component_id", models.CharField(max_length=255)),
                ("provider", models.CharField(db_index=True, max_length=100)),
                ("name", models.CharField(max_length=255)),
                ("current_status", models.CharField(db_index=True, default="operational", help_text="Native provider status, e.g. 'degraded_performance'.", max_length=50)),
                ("description", models.TextField(blank=True, default="")),
                ("group_id", models.CharField(blank=True, default="", max_length=255)),
                ("position", models.IntegerField(default=0)),
                ("last_checked_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "component_registry",
                "ordering": ["provider", "position", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("component_id", "provider"), name="uniq_component_per_provider"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PollingFallback",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("provider", models.CharField(max_length=100, unique=True)),
                ("enabled", models.BooleanField(default=False)),
                ("reason", models.CharField(blank=True, default="", max_length=500)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "polling_fallback",
                "ordering": ["provider"],
            },
        ),
    ]
