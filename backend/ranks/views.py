# ranks/views.py
"""
Rank-aware page serving.

AppShellView renders the single-page application shell for every
client-routed path. The Entry Gate has already run by the time it is
reached, so the credential it attached (possibly refreshed) is what the
client hydrates from.

NavigationView hands the client its rank's manifest.
"""

from django.views.generic import TemplateView
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from ranks.hierarchy import get_rank_display, parse_rank
from ranks.manifest import get_manifest


class AppShellView(TemplateView):
    template_name = "ranks/shell.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        credential = getattr(self.request, "session_credential", None)
        context["hydration"] = {
            "path": self.request.path,
            "credential": credential.as_public_dict() if credential else None,
        }
        return context


class NavigationView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        rank = parse_rank(request.user.rank)
        if rank is None:
            return Response({
                "rank": get_rank_display(None),
                "home": None,
                "allowed": [],
                "nav": [],
            })
        manifest = get_manifest(rank)
        return Response({
            "rank": get_rank_display(rank),
            "home": manifest.home,
            "allowed": sorted(manifest.allowed),
            "nav": [item.as_dict() for item in manifest.nav],
        })
