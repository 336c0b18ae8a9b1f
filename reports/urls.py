"""URL configuration for report views."""

from __future__ import annotations

from django.urls import path

from reports import views

app_name = "reports"

urlpatterns = [
    path("treemap/", views.treemap, name="treemap"),
    path("treemap/data/", views.treemap_data, name="treemap_data"),
]
