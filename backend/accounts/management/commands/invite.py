# accounts/management/commands/invite.py
"""
Create an invitation from the command line.

The only way to seat the first Admiral: the invitation is claimed by the
first identity handoff that arrives with this email.

Usage:
    python manage.py invite founder@example.com --rank admiral
"""

from django.core.management.base import BaseCommand, CommandError

from accounts.models import Invitation, User
from ranks.hierarchy import Rank, parse_rank


class Command(BaseCommand):
    help = "Invite an email address with a rank"

    def add_arguments(self, parser):
        parser.add_argument("email", type=str)
        parser.add_argument(
            "--rank",
            type=str,
            default=Rank.CREW.value,
            choices=Rank.values,
            help="Rank granted on first sign-in (default: crew)",
        )

    def handle(self, *args, **options):
        email = User.objects.normalize_email(options["email"]).lower()
        rank = parse_rank(options["rank"])

        if User.objects.filter(email__iexact=email).exists():
            raise CommandError(f"A user with email {email} already exists.")
        if Invitation.objects.filter(email__iexact=email, status=Invitation.Status.PENDING).exists():
            raise CommandError(f"An invitation for {email} is already pending.")

        invitation = Invitation.objects.create(email=email, rank=rank.value)
        self.stdout.write(self.style.SUCCESS(
            f"Invited {email} as {rank.label} ({invitation.public_id})."
        ))
