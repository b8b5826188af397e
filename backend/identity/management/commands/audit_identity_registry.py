# identity/management/commands/audit_identity_registry.py
"""
Integrity pass over the identity registry.

Usage:
    python manage.py audit_identity_registry
    python manage.py audit_identity_registry --fail-on-unmapped
"""

from django.core.management.base import BaseCommand, CommandError

from identity.exceptions import IdentityConflict
from identity.registry import audit_registry


class Command(BaseCommand):
    help = "Verify the one-to-one external id <-> sovereign id invariant"

    def add_arguments(self, parser):
        parser.add_argument(
            "--fail-on-unmapped",
            action="store_true",
            help="Exit non-zero if any active user has no mapping",
        )

    def handle(self, *args, **options):
        try:
            report = audit_registry()
        except IdentityConflict as exc:
            raise CommandError(f"Registry conflict: {exc}") from exc

        for warning in report.warnings:
            self.stdout.write(self.style.WARNING(f"  WARN  {warning}"))

        if options["fail_on_unmapped"] and report.unmapped_users:
            raise CommandError(f"{len(report.unmapped_users)} user(s) without a mapping.")

        self.stdout.write(self.style.SUCCESS(
            f"Registry consistent: {report.mappings} mapping(s), "
            f"{len(report.unmapped_users)} unmapped user(s)."
        ))
