"""
Trip, stop point, vehicle and driver models for the carpooling application.
"""

from django.db import models
from django.core.validators import MinValueValidator


class TripStatusError(Exception):
    """Exception raised for a forbidden trip status transition."""
    pass


class Driver(models.Model):
    """A driver who can be assigned to vehicles and trips."""

    name = models.CharField(max_length=150)
    phone_number = models.CharField(max_length=32, blank=True, default='')
    date_added = models.DateTimeField(auto_now_add=True)
    date_last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Vehicle(models.Model):
    """A vehicle, possibly shared between several drivers."""

    name = models.CharField(max_length=100)
    brand = models.CharField(max_length=100, blank=True, default='')
    model = models.CharField(max_length=100, blank=True, default='')
    license_plate = models.CharField(max_length=32, blank=True, default='')
    capacity = models.PositiveIntegerField(
        default=4,
        validators=[MinValueValidator(1)],
        help_text="Maximum number of passengers"
    )
    drivers = models.ManyToManyField(Driver, related_name='vehicles', blank=True)
    date_added = models.DateTimeField(auto_now_add=True)
    date_last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.license_plate})" if self.license_plate else self.name


class Trip(models.Model):
    """
    Represents a scheduled ride offering.

    Departure and arrival coordinates are nullable: trips created without
    them can still be found by date/seat search but never by proximity.
    Times of day are stored as "HH:MM" strings and matched exactly.
    """

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        VALIDATED = 'VALIDATED', 'Validated'
        STARTED = 'STARTED', 'Started'
        COMPLETED = 'COMPLETED', 'Completed'
        CANCELLED = 'CANCELLED', 'Cancelled'

    driver = models.ForeignKey(
        Driver,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trips'
    )
    vehicle = models.ForeignKey(
        Vehicle,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trips'
    )
    departure = models.CharField(max_length=255, blank=True, default='')
    departure_latitude = models.FloatField(
        null=True,
        blank=True,
        help_text="Departure point latitude"
    )
    departure_longitude = models.FloatField(
        null=True,
        blank=True,
        help_text="Departure point longitude"
    )
    arrival = models.CharField(max_length=255, blank=True, default='')
    arrival_latitude = models.FloatField(
        null=True,
        blank=True,
        help_text="Arrival point latitude"
    )
    arrival_longitude = models.FloatField(
        null=True,
        blank=True,
        help_text="Arrival point longitude"
    )
    departure_date = models.DateField()
    departure_time = models.CharField(
        max_length=5,
        blank=True,
        default='',
        help_text="Departure time of day (HH:MM)"
    )
    estimated_arrival_date = models.DateField(null=True, blank=True)
    arrival_time = models.CharField(
        max_length=5,
        blank=True,
        default='',
        help_text="Estimated arrival time of day (HH:MM)"
    )
    description = models.TextField(blank=True, default='')
    instructions = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING
    )
    distance = models.FloatField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Route length in kilometers"
    )
    available_seats = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(0)],
        help_text="Number of available seats"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)]
    )
    date_added = models.DateTimeField(auto_now_add=True)
    date_last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date_added']
        verbose_name = 'Trip'
        verbose_name_plural = 'Trips'

    def __str__(self):
        return f"Trip {self.id}: ({self.departure_latitude}, {self.departure_longitude}) -> ({self.arrival_latitude}, {self.arrival_longitude})"

    @property
    def departure_coords(self) -> tuple:
        """Return departure coordinates as tuple."""
        return (self.departure_latitude, self.departure_longitude)

    @property
    def arrival_coords(self) -> tuple:
        """Return arrival coordinates as tuple."""
        return (self.arrival_latitude, self.arrival_longitude)

    @property
    def has_coordinates(self) -> bool:
        return None not in (*self.departure_coords, *self.arrival_coords)

    def check_status_transition(self, new_status: str) -> None:
        """
        Validate a status change.

        Raises:
            TripStatusError: If the trip is completed, or if a cancelled
                trip is moved to anything but STARTED.
        """
        if self.status == self.Status.COMPLETED:
            raise TripStatusError("Trip is completed, its status can no longer change")
        if self.status == self.Status.CANCELLED and new_status != self.Status.STARTED:
            raise TripStatusError("A cancelled trip can only be restarted (STARTED)")

    def change_status(self, new_status: str) -> None:
        self.check_status_transition(new_status)
        self.status = new_status
        self.save(update_fields=['status', 'date_last_updated'])


class StopPoint(models.Model):
    """An intermediate waypoint on a trip's route."""

    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='stop_points')
    label = models.CharField(max_length=255, blank=True, default='')
    latitude = models.FloatField()
    longitude = models.FloatField()
    order = models.IntegerField(help_text="Position of the stop along the route")

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return f"Stop {self.order} of trip {self.trip_id}: ({self.latitude}, {self.longitude})"

    @property
    def coords(self) -> tuple:
        return (self.latitude, self.longitude)
