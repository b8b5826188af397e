from django.urls import path

from .views import AdminDeleteUserView, AdminRecoveryView, DeletionLogListView

app_name = "vanish"

urlpatterns = [
    path("admin/users/<uuid:public_id>", AdminDeleteUserView.as_view(), name="admin-delete-user"),
    path("admin/users/<uuid:public_id>/recovery", AdminRecoveryView.as_view(), name="admin-recovery"),
    path("admin/deletions", DeletionLogListView.as_view(), name="deletion-log"),
]
