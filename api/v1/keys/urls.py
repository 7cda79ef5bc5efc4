"""
URL configuration for public key API endpoints.
"""

from django.urls import path

from api.v1.keys import views

urlpatterns = [
    path("validate", views.ValidateKeyView.as_view(), name="validate-key"),
    path("status", views.KeyStatusView.as_view(), name="key-status"),
    path("settings", views.PublicSettingsView.as_view(), name="public-settings"),
    path("stats", views.StatsView.as_view(), name="stats"),
]
