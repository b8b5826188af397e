# credentials/middleware.py
"""
Entry Gate: rank check on initial page loads.

Runs on full page loads and direct navigation only. In-app navigation
never reaches the server, so the gate is a coarse UX filter; the data
layer (accounts.authz rank guards) is the security boundary.

Flow:
1. Admin realm kill switch
2. Pass-through (API, ops, static assets, Django admin)
3. Public page -> serve, stamp theme headers
4. No credential -> redirect to sign-in
5. Refresh credential from the database
   - user gone -> self-healing invalidation
   - database error -> keep the existing credential for this request
6. Route allowed for rank? hard mode redirects to rank home, soft mode
   logs "would block" and serves anyway
7. Stamp rank / org / theme headers, set refreshed cookie

Enforcement mode is read once when the middleware is built.
"""

import logging
import re
from dataclasses import dataclass
from typing import Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.http import HttpResponseRedirect
from django.utils.cache import patch_vary_headers

from credentials.session import (
    CredentialRejected,
    invalidation_response,
    read_credential,
    read_token,
    refresh_credential,
    write_credential,
)
from ops.metrics import record_gate_decision, record_refresh
from ranks.hierarchy import parse_rank
from ranks.manifest import get_rank_home, is_route_allowed

logger = logging.getLogger(__name__)

User = get_user_model()

SOFT = "soft"
HARD = "hard"


@dataclass(frozen=True)
class GateConfig:
    """Deployment-time gate configuration."""

    enforcement: str
    admin_realm_enabled: bool
    sign_in_url: str

    @property
    def hard(self) -> bool:
        return self.enforcement == HARD

    @classmethod
    def from_settings(cls) -> "GateConfig":
        enforcement = getattr(settings, "RANK_GATE_ENFORCEMENT", SOFT)
        if enforcement not in (SOFT, HARD):
            raise ImproperlyConfigured(
                f"RANK_GATE_ENFORCEMENT must be 'soft' or 'hard', got {enforcement!r}"
            )
        return cls(
            enforcement=enforcement,
            admin_realm_enabled=getattr(settings, "ENABLE_ADMIN_REALM", False),
            sign_in_url=settings.SIGN_IN_URL,
        )


class EntryGateMiddleware:
    """
    Authorize initial page loads against the rank manifests.

    Attaches request.session_credential (possibly refreshed, or None)
    for the app shell.
    """

    # -------------------------------------------------------------------------
    # PUBLIC PAGES - served without a credential
    # -------------------------------------------------------------------------
    PUBLIC_PREFIXES = (
        "/landing",
        "/sign-in",
        "/sign-up",
        "/forgot",
        "/recovery",
        "/invite",
    )

    # -------------------------------------------------------------------------
    # PASS-THROUGH - not pages; authorized elsewhere or not at all
    # -------------------------------------------------------------------------
    PASSTHROUGH_PREFIXES = (
        "/api/",
        "/_health/",
        "/_metrics/",
        "/static/",
        "/django-admin/",
    )

    ADMIN_REALM = "/admin"

    ASSET_RE = re.compile(
        r"\.(?:html?|css|js|map|jpe?g|webp|png|gif|svg|ttf|woff2?|ico|csv|txt|webmanifest)$"
    )

    DEFAULT_THEME_NAME = "transtheme"
    DEFAULT_THEME_MODE = "light"

    def __init__(self, get_response):
        self.get_response = get_response
        self.config = GateConfig.from_settings()

    def __call__(self, request):
        path = request.path_info
        request.session_credential = None

        # =====================================================================
        # CASE 1: Admin realm switched off
        # =====================================================================
        if self._is_admin_realm(path) and not self.config.admin_realm_enabled:
            logger.warning("Admin realm access blocked", extra={"path": path})
            record_gate_decision("admin_realm_disabled", self.config.enforcement)
            return HttpResponseRedirect("/")

        # =====================================================================
        # CASE 2: Pass-through
        # =====================================================================
        if self._is_passthrough(path):
            return self.get_response(request)

        credential = read_credential(request)

        # =====================================================================
        # CASE 3: Public page
        # =====================================================================
        if self._is_public(path):
            request.session_credential = credential
            response = self.get_response(request)
            self._stamp_theme(response, credential)
            return response

        # =====================================================================
        # CASE 4: No credential
        # =====================================================================
        if credential is None:
            record_gate_decision("no_credential", self.config.enforcement)
            return HttpResponseRedirect(self.config.sign_in_url)

        # =====================================================================
        # CASE 5: Refresh from the database
        # =====================================================================
        new_token = None
        try:
            user = User.objects.filter(
                public_id=credential.sovereign_id, is_active=True
            ).first()
        except DatabaseError as exc:
            logger.warning(
                "Credential refresh failed; using existing credential",
                extra={"sovereign_id": credential.sovereign_id, "error": str(exc)},
            )
            record_refresh("error")
        else:
            if user is None:
                logger.info(
                    "Sovereign user missing; invalidating session",
                    extra={"sovereign_id": credential.sovereign_id},
                )
                record_refresh("user_missing")
                return invalidation_response()

            try:
                refreshed = refresh_credential(read_token(request), user)
            except CredentialRejected:
                # Expired between the read above and the refresh.
                record_gate_decision("no_credential", self.config.enforcement)
                return HttpResponseRedirect(self.config.sign_in_url)
            if refreshed is not None:
                new_token, credential = refreshed
                record_refresh("reminted")
            else:
                record_refresh("fresh")

        request.session_credential = credential

        # =====================================================================
        # CASE 6: Rank check
        # =====================================================================
        rank = credential.rank
        if is_route_allowed(rank, path):
            record_gate_decision("allowed", self.config.enforcement)
        elif self.config.hard:
            record_gate_decision("denied", self.config.enforcement)
            response = self._deny(rank, path)
            if new_token:
                write_credential(response, new_token)
            return response
        else:
            logger.info(
                "Entry gate would block",
                extra={"rank": rank, "path": path},
            )
            record_gate_decision("would_block", self.config.enforcement)

        # =====================================================================
        # CASE 7: Forward
        # =====================================================================
        response = self.get_response(request)
        response["X-Effective-Rank"] = rank or ""
        response["X-Actual-Rank"] = rank or ""
        response["X-Org-Id"] = credential.org_id or ""
        self._stamp_theme(response, credential)
        if new_token:
            write_credential(response, new_token)
        return response

    def _deny(self, rank, path):
        if parse_rank(rank) is None:
            # Every route is denied without a rank, home included.
            logger.info("Entry gate denied: no rank", extra={"path": path})
            return HttpResponseRedirect(f"{self.config.sign_in_url}?error=rank_not_assigned")
        home = get_rank_home(rank)
        logger.info(
            "Entry gate denied",
            extra={"rank": rank, "path": path, "redirect": home},
        )
        return HttpResponseRedirect(home)

    def _stamp_theme(self, response, credential):
        response["X-Theme-Name"] = (credential and credential.theme_name) or self.DEFAULT_THEME_NAME
        response["X-Theme-Mode"] = (credential and credential.theme_mode) or self.DEFAULT_THEME_MODE
        patch_vary_headers(response, ("Cookie",))

    def _is_admin_realm(self, path: str) -> bool:
        return path == self.ADMIN_REALM or path.startswith(self.ADMIN_REALM + "/")

    def _is_passthrough(self, path: str) -> bool:
        return path.startswith(self.PASSTHROUGH_PREFIXES) or bool(self.ASSET_RE.search(path))

    def _is_public(self, path: str) -> bool:
        return any(
            path == prefix or path.startswith(prefix + "/")
            for prefix in self.PUBLIC_PREFIXES
        )
