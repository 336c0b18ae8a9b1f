"""URL configuration for treemapViz."""

from __future__ import annotations

from django.urls import include, path

urlpatterns = [
    path("reports/", include("reports.urls")),
]
