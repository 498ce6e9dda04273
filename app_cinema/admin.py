from django.contrib import admin, messages
from django.utils.html import format_html
from import_export.admin import ImportExportModelAdmin

from app_core.qr import qr_data_uri

from .models import AttendanceLog, Movie, Reservation, Screening
from .stats import annotate_screening_stats, occupancy_rate
from .validation import validate_reservation_qr


# -------------------------
# Inlines
# -------------------------
class ScreeningInline(admin.TabularInline):
    model = Screening
    extra = 0
    fields = ("starts_at", "ends_at", "auditorium", "capacity")
    ordering = ("starts_at",)


class ReservationInline(admin.TabularInline):
    model = Reservation
    extra = 0
    fields = ("user", "status", "seat_label", "qr_token")
    readonly_fields = ("qr_token",)
    raw_id_fields = ("user",)


@admin.register(Movie)
class MovieAdmin(ImportExportModelAdmin):
    list_display = ("title", "duration_minutes", "rating", "is_active", "created_at")
    list_filter = ("is_active", "rating")
    search_fields = ("title", "synopsis")
    inlines = [ScreeningInline]


@admin.register(Screening)
class ScreeningAdmin(ImportExportModelAdmin):
    list_display = ("movie", "starts_at", "auditorium", "capacity", "reserved", "occupancy")
    list_filter = ("auditorium",)
    search_fields = ("movie__title", "auditorium")
    date_hierarchy = "starts_at"
    list_select_related = ("movie",)
    inlines = [ReservationInline]

    def get_queryset(self, request):
        # Conteos en la misma consulta del listado
        return annotate_screening_stats(super().get_queryset(request))

    @admin.display(description="Reservas", ordering="total_reservations")
    def reserved(self, obj):
        return obj.total_reservations

    @admin.display(description="Ocupación %")
    def occupancy(self, obj):
        return occupancy_rate(obj.total_reservations, obj.capacity)


@admin.register(Reservation)
class ReservationAdmin(ImportExportModelAdmin):
    list_display = ("qr_token", "screening", "user", "status", "seat_label", "reserved_at")
    list_filter = ("status", "screening__auditorium")
    search_fields = ("qr_token", "user__email", "screening__movie__title")
    raw_id_fields = ("user", "screening")
    readonly_fields = ("qr_token", "qr_preview")
    list_select_related = ("screening__movie", "user")
    actions = ["validate_attendance"]

    @admin.display(description="QR")
    def qr_preview(self, obj):
        if not obj.pk:
            return "-"
        return format_html('<img src="{}" alt="{}" width="160" height="160">', qr_data_uri(obj.qr_token), obj.qr_token)

    @admin.action(description="Validar asistencia (check-in)")
    def validate_attendance(self, request, queryset):
        for reservation in queryset:
            result = validate_reservation_qr(request.user, reservation.qr_token, request.user.pk)
            level = messages.SUCCESS if result.is_valid else messages.WARNING
            self.message_user(request, f"{reservation.qr_token}: {result.message}", level)


@admin.register(AttendanceLog)
class AttendanceLogAdmin(admin.ModelAdmin):
    list_display = ("reservation", "scanned_by", "scanned_at")
    search_fields = ("reservation__qr_token", "scanned_by__email")
    list_select_related = ("reservation", "scanned_by")
    date_hierarchy = "scanned_at"

    # Los registros de asistencia solo se crean al validar un QR
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
