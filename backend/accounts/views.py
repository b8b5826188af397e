from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts import commands
from accounts.authz import IsAdmiral, IsCaptainOrHigher, get_users_by_rank, resolve_actor
from accounts.models import User
from ranks.hierarchy import Rank, get_rank_display, parse_rank

from .serializers import (
    InvitationCreateSerializer,
    InvitationSerializer,
    ProfileSerializer,
    SetRankSerializer,
    UserSerializer,
)


def _fail(result):
    return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)


class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        actor = resolve_actor(request)
        return Response(ProfileSerializer(actor.user).data)

    def patch(self, request, *args, **kwargs):
        actor = resolve_actor(request)
        serializer = ProfileSerializer(actor.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = commands.update_profile(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(ProfileSerializer(result.data["user"]).data)

    def delete(self, request, *args, **kwargs):
        # Self-deletion is part of the account-deletion cascade.
        from vanish.views import delete_own_account

        return delete_own_account(request)


class AdminUserListView(APIView):
    permission_classes = [IsAdmiral]

    def get(self, request, *args, **kwargs):
        rank_param = request.query_params.get("rank")
        if rank_param:
            rank = parse_rank(rank_param)
            if rank is None:
                return Response(
                    {"detail": f"Unknown rank: {rank_param}"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            users = get_users_by_rank(rank)
        else:
            users = User.objects.filter(is_active=True).order_by("email")
        return Response(UserSerializer(users, many=True).data)


class AdminSetRankView(APIView):
    permission_classes = [IsAdmiral]

    def post(self, request, public_id, *args, **kwargs):
        serializer = SetRankSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.set_user_rank(
            resolve_actor(request), public_id, serializer.validated_data["rank"]
        )
        if not result.success:
            return _fail(result)
        return Response(UserSerializer(result.data["user"]).data)


class InvitationListCreateView(APIView):
    permission_classes = [IsCaptainOrHigher]

    def get(self, request, *args, **kwargs):
        invitations = commands.list_invitations(resolve_actor(request))
        return Response(InvitationSerializer(invitations, many=True).data)

    def post(self, request, *args, **kwargs):
        serializer = InvitationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_invitation(
            resolve_actor(request),
            serializer.validated_data["email"],
            serializer.validated_data["rank"],
        )
        if not result.success:
            return _fail(result)
        data = InvitationSerializer(result.data["invitation"]).data
        data["ticket"] = result.data["ticket"]
        return Response(data, status=status.HTTP_201_CREATED)


class InvitationRevokeView(APIView):
    permission_classes = [IsCaptainOrHigher]

    def delete(self, request, public_id, *args, **kwargs):
        result = commands.revoke_invitation(resolve_actor(request), public_id)
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RankListView(APIView):
    """Rank table for badges and the admin rank picker."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response([get_rank_display(rank) for rank in Rank])
