from __future__ import annotations

from django.contrib import admin

from .models import RecordDocument


@admin.register(RecordDocument)
class RecordDocumentAdmin(admin.ModelAdmin):
    list_display = ("tracking_id", "record_type", "status", "date_time_in", "updated_at")
    list_filter = ("record_type", "status")
    search_fields = ("tracking_id", "remarks")
    readonly_fields = ("remarks_history", "created_at", "updated_at")
