"""
Management command to check connectivity of registered status providers.

Usage:
    python manage.py provider_health                 # All providers
    python manage.py provider_health openai          # Specific providers
    python manage.py provider_health --json          # Output as JSON
    python manage.py provider_health --fail-on-error # Exit 1 if any provider is down
"""

import json
import sys

from django.core.management.base import BaseCommand, CommandError

from apps.providers.registry import get_registry


class Command(BaseCommand):
    help = "Check connectivity of registered status providers"

    def add_arguments(self, parser):
        parser.add_argument(
            "providers",
            nargs="*",
            type=str,
            help="Provider names to check. Checks all if not specified.",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            dest="json_output",
            help="Output results as JSON.",
        )
        parser.add_argument(
            "--fail-on-error",
            action="store_true",
            help="Exit with code 1 if any provider is unhealthy.",
        )

    def handle(self, *args, **options):
        registry = get_registry()
        names = [name.lower() for name in options["providers"]] or registry.names()

        unknown = [name for name in names if not registry.has(name)]
        if unknown:
            raise CommandError(
                f"Unknown provider(s): {', '.join(unknown)}. "
                f"Available: {', '.join(registry.names()) or 'none'}"
            )

        health = {name: registry.is_healthy(name) for name in names}

        if options["json_output"]:
            self.stdout.write(json.dumps(health, indent=2, sort_keys=True))
        else:
            self.stdout.write(self.style.SUCCESS("Provider health"))
            self.stdout.write("-" * 40)
            for name, healthy in health.items():
                provider = registry.get(name)
                last_sync = provider.last_sync_at.isoformat() if provider.last_sync_at else "never"
                state = self.style.SUCCESS("[UP]") if healthy else self.style.ERROR("[DOWN]")
                self.stdout.write(f"{state} {name} (page {provider.page_id or '-'}, last sync {last_sync})")
            self.stdout.write("-" * 40)

        if options["fail_on_error"] and not all(health.values()):
            sys.exit(1)
