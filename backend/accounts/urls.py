# accounts/urls.py
"""
URL configuration for the accounts API.

Endpoints:
- /users/me - Own profile (GET, PATCH; DELETE runs the deletion cascade)
- /admin/users - User directory by rank (Admiral)
- /admin/users/<id>/rank - Assign rank (Admiral)
- /invitations - Invitations (Captain and above)
- /ranks - Rank table
"""

from django.urls import path

from .views import (
    AdminSetRankView,
    AdminUserListView,
    InvitationListCreateView,
    InvitationRevokeView,
    MeView,
    RankListView,
)

app_name = "accounts"

urlpatterns = [
    path("users/me", MeView.as_view(), name="me"),
    path("admin/users", AdminUserListView.as_view(), name="admin-user-list"),
    path("admin/users/<uuid:public_id>/rank", AdminSetRankView.as_view(), name="admin-set-rank"),
    path("invitations", InvitationListCreateView.as_view(), name="invitation-list"),
    path("invitations/<uuid:public_id>", InvitationRevokeView.as_view(), name="invitation-revoke"),
    path("ranks", RankListView.as_view(), name="rank-list"),
]
