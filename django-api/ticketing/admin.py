from django.contrib import admin

from ticketing.models import Event, Notification, Redemption, Ticket, TicketType


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1


class RedemptionInline(admin.TabularInline):
    model = Redemption
    extra = 0
    can_delete = False
    readonly_fields = ["redeemed_at", "validator_id"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "venue_name", "starts_at", "promoter"]
    search_fields = ["title", "venue_name"]
    inlines = [TicketTypeInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "capacity", "remaining"]
    list_filter = ["event"]
    readonly_fields = ["remaining"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ["id", "event", "user", "quantity", "is_used", "cancelled_at", "purchase_date"]
    list_filter = ["event", "is_used"]
    search_fields = ["qr_code"]
    readonly_fields = [
        "qr_code",
        "is_used",
        "validated_at",
        "validated_by",
        "cancelled_at",
        "quantity",
        "price",
    ]
    inlines = [RedemptionInline]


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["title", "user", "kind", "is_read", "created_at"]
    list_filter = ["kind", "is_read"]
