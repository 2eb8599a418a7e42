"""API URL routes for DocTrack REST interface."""

from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from doctrack.interfaces.rest.views import (
    DashboardView,
    RecordTypeListView,
    RecordViewSet,
    ReportView,
)

router = DefaultRouter()
router.register(r"records/(?P<record_type>[a-z_]+)", RecordViewSet, basename="record")

urlpatterns = [
    path("", include(router.urls)),
    path("record-types/", RecordTypeListView.as_view(), name="record-type-list"),
    path("dashboard/", DashboardView.as_view(), name="dashboard"),
    path("reports/", ReportView.as_view(), name="report"),
]
