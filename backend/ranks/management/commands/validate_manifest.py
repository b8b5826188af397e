# ranks/management/commands/validate_manifest.py
"""
Check that rank manifests and the client-side router agree.

Usage:
    python manage.py validate_manifest
    python manage.py validate_manifest --views-dir ../frontend/src/views
    python manage.py validate_manifest --strict      # warnings fail too
"""

from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from ranks.validation import validate_registry


class Command(BaseCommand):
    help = "Validate rank manifests against the router dispatch table"

    def add_arguments(self, parser):
        parser.add_argument(
            "--views-dir",
            type=str,
            help="Frontend views directory (defaults to FRONTEND_VIEWS_DIR)",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Treat drift warnings as errors",
        )

    def handle(self, *args, **options):
        views_dir = options.get("views_dir") or getattr(settings, "FRONTEND_VIEWS_DIR", None)
        if views_dir:
            views_dir = Path(views_dir)
            if not views_dir.is_dir():
                raise CommandError(f"Views directory not found: {views_dir}")
        else:
            views_dir = None
            self.stdout.write(self.style.WARNING(
                "FRONTEND_VIEWS_DIR not set; skipping view file existence check."
            ))

        report = validate_registry(views_dir)

        for warning in report.warnings:
            self.stdout.write(self.style.WARNING(f"  WARN  {warning}"))
        for error in report.errors:
            self.stdout.write(self.style.ERROR(f"  ERROR {error}"))

        if report.errors or (options["strict"] and report.warnings):
            raise CommandError(
                f"Manifest validation failed: {len(report.errors)} error(s), "
                f"{len(report.warnings)} warning(s)."
            )

        self.stdout.write(self.style.SUCCESS(
            f"Manifests valid ({len(report.warnings)} warning(s))."
        ))
