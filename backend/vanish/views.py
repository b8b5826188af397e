from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import IsAdmiral, resolve_actor
from credentials.session import clear_credential
from vanish.cascade import delete_user_account
from vanish.models import DeletionLog
from vanish.recovery import issue_recovery_ticket


def _log_data(log: DeletionLog) -> dict:
    return {
        "id": str(log.public_id),
        "sovereign_id": str(log.sovereign_id),
        "status": log.status,
        "self_deletion": log.self_deletion,
        "mapping_deleted": log.mapping_deleted,
        "provider_deleted": log.provider_deleted,
        "provider_error": log.provider_error,
        "completed_at": log.completed_at,
    }


def _reason(request) -> str:
    return request.data.get("reason") or request.query_params.get("reason", "")


def delete_own_account(request):
    """DELETE /api/users/me (dispatched by accounts.views.MeView)."""
    actor = resolve_actor(request)
    result = delete_user_account(actor, actor.sovereign_id, _reason(request))
    if not result.success:
        return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

    response = Response(status=status.HTTP_204_NO_CONTENT)
    clear_credential(response)
    return response


class AdminDeleteUserView(APIView):
    permission_classes = [IsAdmiral]

    def delete(self, request, public_id, *args, **kwargs):
        result = delete_user_account(resolve_actor(request), public_id, _reason(request))
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(_log_data(result.data["log"]))


class AdminRecoveryView(APIView):
    permission_classes = [IsAdmiral]

    def post(self, request, public_id, *args, **kwargs):
        result = issue_recovery_ticket(resolve_actor(request), public_id)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response({
            "user": str(result.data["user"].public_id),
            "ticket": result.data["ticket"],
        })


class DeletionLogListView(APIView):
    permission_classes = [IsAdmiral]

    def get(self, request, *args, **kwargs):
        return Response([_log_data(log) for log in DeletionLog.objects.all()[:200]])
