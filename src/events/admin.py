# src/events/admin.py

from django.contrib import admin

from . import models


class TicketCategoryInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TicketCategory
    extra = 0
    show_change_link = True


class TicketTypeInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TicketType
    extra = 0
    fields = ("name", "price", "quantity_available", "max_per_order", "pdf_template")


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ("title", "venue_name", "start_date", "created_at")
    search_fields = ("title", "venue_name")
    inlines = [TicketCategoryInline]


@admin.register(models.TicketCategory)
class TicketCategoryAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ("name", "event")
    search_fields = ("name", "event__title")
    inlines = [TicketTypeInline]


class OrderItemInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.OrderItem
    extra = 0


class OrderAttendeeInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.OrderAttendee
    extra = 0


@admin.register(models.Order)
class OrderAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ("id", "user", "payment_status", "created_at")
    list_filter = ("payment_status",)
    search_fields = ("id", "user__username", "user__email", "transaction_id")
    inlines = [OrderItemInline, OrderAttendeeInline]


@admin.register(models.Ticket)
class TicketAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ("id", "pass_id", "order", "event_id", "attendee_name", "is_validated", "has_pdf")
    list_filter = ("is_validated",)
    search_fields = ("pass_id", "attendee_name", "attendee_email")
    readonly_fields = ("id", "pass_id", "order", "event_id", "ticket_type_id", "validation_time", "created_at")

    @admin.display(boolean=True, description="PDF")
    def has_pdf(self, obj: models.Ticket) -> bool:
        return bool(obj.pdf_path)
