"""
Management command to list available notification drivers and their requirements.

Usage:
    python manage.py list_notify_drivers
    python manage.py list_notify_drivers --verbose
"""

from django.core.management.base import BaseCommand

from apps.notify.drivers import DRIVER_REGISTRY, is_notify_enabled
from apps.notify.models import NotificationChannel

DRIVER_INFO = {
    "console": {
        "description": "Write notifications to the application log",
        "required_config": [],
        "optional_config": ["template"],
    },
    "slack": {
        "description": "Send notifications to Slack via incoming webhooks",
        "required_config": ["webhook_url"],
        "optional_config": ["channel", "template", "timeout"],
    },
    "telegram": {
        "description": "Send notifications through a Telegram bot",
        "required_config": ["bot_token", "chat_id"],
        "optional_config": ["parse_mode", "template", "timeout"],
    },
    "generic": {
        "description": "Send notifications to a custom HTTP endpoint",
        "required_config": ["endpoint"],
        "optional_config": ["webhook_url", "method", "headers", "payload_template", "timeout"],
    },
}


class Command(BaseCommand):
    help = "List available notification drivers and their configuration requirements"

    def add_arguments(self, parser):
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed configuration requirements",
        )

    def handle(self, *args, **options):
        verbose = options.get("verbose", False)

        self.stdout.write(self.style.SUCCESS("Available Notification Drivers"))
        self.stdout.write("-" * 60)

        for name in DRIVER_REGISTRY:
            info = DRIVER_INFO.get(name, {})
            state = "enabled" if is_notify_enabled(name) else "skipped"
            self.stdout.write(f"\n{self.style.WARNING(name)} [{state}]")
            self.stdout.write(f"  {info.get('description', '')}")

            if verbose:
                required = info.get("required_config", [])
                if required:
                    self.stdout.write("  Required config:")
                    for key in required:
                        self.stdout.write(f"    - {key}")
                else:
                    self.stdout.write("  Required config: none")

                optional = info.get("optional_config", [])
                if optional:
                    self.stdout.write("  Optional config:")
                    for key in optional:
                        self.stdout.write(f"    - {key}")

        channels = NotificationChannel.objects.filter(is_active=True)
        self.stdout.write("\n" + "-" * 60)
        self.stdout.write(f"\nActive channels: {channels.count()}")
        for channel in channels:
            self.stdout.write(f"  {channel.name} ({channel.driver})")
