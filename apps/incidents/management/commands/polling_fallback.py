"""
Management command to inspect or flip the polling fallback switch.

Usage:
    python manage.py polling_fallback                          # Show every switch
    python manage.py polling_fallback openai --enable          # Start polling openai
    python manage.py polling_fallback openai --disable --reason "webhooks restored"
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.incidents.polling import FallbackController
from apps.providers.registry import get_registry


class Command(BaseCommand):
    help = "Show or change the per-provider polling fallback switch"

    def add_arguments(self, parser):
        parser.add_argument("provider", nargs="?", type=str, help="Provider name.")
        group = parser.add_mutually_exclusive_group()
        group.add_argument("--enable", action="store_true", help="Enable polling.")
        group.add_argument("--disable", action="store_true", help="Disable polling.")
        parser.add_argument("--reason", type=str, default="", help="Reason stored with the switch.")

    def handle(self, *args, **options):
        controller = FallbackController()
        provider = (options.get("provider") or "").lower()

        if options["enable"] or options["disable"]:
            if not provider:
                raise CommandError("A provider name is required with --enable/--disable.")
            if options["enable"]:
                controller.enable(provider, options["reason"] or "enabled from command line")
            else:
                controller.disable(provider, options["reason"] or "disabled from command line")

        names = [provider] if provider else sorted(set(get_registry().names()) | set(controller.states()))
        default = "on" if getattr(settings, "POLLING_ENABLED", False) else "off"

        self.stdout.write(self.style.SUCCESS(f"Polling fallback (default: {default})"))
        for name in names:
            if controller.is_enabled(name):
                self.stdout.write(f"  {name:20} {self.style.SUCCESS('ENABLED')}")
            else:
                self.stdout.write(f"  {name:20} {self.style.NOTICE('disabled')}")
