"""
Management command to run a polling cycle by hand.

Usage:
    python manage.py poll_provider openai            # One polling cycle (honours the fallback switch)
    python manage.py poll_provider openai --force    # Poll even if the fallback is disabled
    python manage.py poll_provider openai --sync     # Full sync: components + incidents
    python manage.py poll_provider --all --json      # Every registered provider, JSON output
"""

import json

from django.core.management.base import BaseCommand, CommandError

from apps.incidents.polling import FallbackController, PollingOrchestrator
from apps.providers.registry import get_registry


class _AlwaysEnabled(FallbackController):
    def is_enabled(self, provider: str) -> bool:
        return True


class Command(BaseCommand):
    help = "Run a polling cycle for one or all registered status providers"

    def add_arguments(self, parser):
        parser.add_argument(
            "providers",
            nargs="*",
            type=str,
            help="Provider names to poll (e.g., openai).",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Poll every registered provider.",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Ignore the polling fallback switch.",
        )
        parser.add_argument(
            "--sync",
            action="store_true",
            help="Run a full provider sync (components and incidents) instead.",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            dest="json_output",
            help="Output results as JSON.",
        )

    def handle(self, *args, **options):
        registry = get_registry()
        names = registry.names() if options["all"] else [n.lower() for n in options["providers"]]
        if not names:
            raise CommandError("Name at least one provider or pass --all.")

        unknown = [name for name in names if not registry.has(name)]
        if unknown:
            raise CommandError(
                f"Unknown provider(s): {', '.join(unknown)}. "
                f"Available: {', '.join(registry.names()) or 'none'}"
            )

        if options["sync"]:
            results = [registry.get(name).sync().to_dict() for name in names]
        else:
            controller = _AlwaysEnabled() if options["force"] else FallbackController()
            orchestrator = PollingOrchestrator(registry=registry, controller=controller)
            results = [orchestrator.run(name).to_dict() for name in names]

        if options["json_output"]:
            self.stdout.write(json.dumps(results, indent=2))
            return

        for result in results:
            self._output_text(result)

    def _output_text(self, result: dict):
        name = self.style.WARNING(result["provider"])
        errors = result.get("errors") or []

        if result.get("status") == "skipped":
            self.stdout.write(f"{name}: skipped ({result.get('reason')})")
            return

        if "fetched" in result:
            summary = (
                f"{result['fetched']} fetched, {result['new']} new, "
                f"{result['changed']} changed, {result['duplicates']} duplicate"
            )
            if result.get("ignored"):
                summary += f", {result['ignored']} ignored (no id)"
        else:
            summary = (
                f"{result['incidents_seen']} incidents ({result['incidents_changed']} changed), "
                f"{result['components_refreshed']} components"
            )

        if errors:
            self.stdout.write(self.style.ERROR(f"{result['provider']}: {summary}"))
            for error in errors:
                self.stdout.write(self.style.ERROR(f"    {error}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"{result['provider']}: {summary}"))
