"""
Admin configuration for the trips app.
"""

from django.contrib import admin
from .models import Driver, StopPoint, Trip, Vehicle


class StopPointInline(admin.TabularInline):
    model = StopPoint
    extra = 0
    ordering = ['order']


@admin.register(Trip)
class TripAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'departure',
        'arrival',
        'departure_date',
        'departure_time',
        'available_seats',
        'status',
        'driver',
        'vehicle',
    ]
    list_filter = ['status', 'departure_date']
    search_fields = ['id', 'departure', 'arrival']
    readonly_fields = ['date_added', 'date_last_updated']
    ordering = ['-date_added']
    inlines = [StopPointInline]


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'brand', 'model', 'license_plate', 'capacity']
    search_fields = ['name', 'license_plate']
    filter_horizontal = ['drivers']


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'phone_number', 'date_added']
    search_fields = ['name', 'phone_number']
