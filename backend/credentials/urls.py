from django.urls import path

from .views import SessionInvalidateView, SessionRefreshView, SessionView

urlpatterns = [
    path("session", SessionView.as_view(), name="session"),
    path("session/invalidate", SessionInvalidateView.as_view(), name="session-invalidate"),
    path("session/refresh", SessionRefreshView.as_view(), name="session-refresh"),
]
