"""
URL configuration for administrative API endpoints.
"""

from django.urls import path

from api.v1.admin import views

urlpatterns = [
    path("keys", views.KeysView.as_view(), name="admin-keys"),
    path("keys/expire", views.ExpireKeysView.as_view(), name="admin-expire-keys"),
    path("keys/<str:key_id>", views.KeyDetailView.as_view(), name="admin-key-detail"),
    path("keys/<str:key_id>/revoke", views.RevokeKeyView.as_view(), name="admin-revoke-key"),
    path(
        "keys/<str:key_id>/reactivate",
        views.ReactivateKeyView.as_view(),
        name="admin-reactivate-key",
    ),
    path("logs/prune", views.PruneLogsView.as_view(), name="admin-prune-logs"),
    path("activity", views.ActivityView.as_view(), name="admin-activity"),
    path("settings", views.AdminSettingsView.as_view(), name="admin-settings"),
]
