import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Driver',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=150)),
                ('phone_number', models.CharField(blank=True, default='', max_length=32)),
                ('date_added', models.DateTimeField(auto_now_add=True)),
                ('date_last_updated', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('brand', models.CharField(blank=True, default='', max_length=100)),
                ('model', models.CharField(blank=True, default='', max_length=100)),
                ('license_plate', models.CharField(blank=True, default='', max_length=32)),
                ('capacity', models.PositiveIntegerField(default=4, help_text='Maximum number of passengers', validators=[django.core.validators.MinValueValidator(1)])),
                ('date_added', models.DateTimeField(auto_now_add=True)),
                ('date_last_updated', models.DateTimeField(auto_now=True)),
                ('drivers', models.ManyToManyField(blank=True, related_name='vehicles', to='trips.driver')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Trip',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('departure', models.CharField(blank=True, default='', max_length=255)),
                ('departure_latitude', models.FloatField(blank=True, help_text='Departure point latitude', null=True)),
                ('departure_longitude', models.FloatField(blank=True, help_text='Departure point longitude', null=True)),
                ('arrival', models.CharField(blank=True, default='', max_length=255)),
                ('arrival_latitude', models.FloatField(blank=True, help_text='Arrival point latitude', null=True)),
                ('arrival_longitude', models.FloatField(blank=True, help_text='Arrival point longitude', null=True)),
                ('departure_date', models.DateField()),
                ('departure_time', models.CharField(blank=True, default='', help_text='Departure time of day (HH:MM)', max_length=5)),
                ('estimated_arrival_date', models.DateField(blank=True, null=True)),
                ('arrival_time', models.CharField(blank=True, default='', help_text='Estimated arrival time of day (HH:MM)', max_length=5)),
                ('description', models.TextField(blank=True, default='')),
                ('instructions', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('VALIDATED', 'Validated'), ('STARTED', 'Started'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='PENDING', max_length=16)),
                ('distance', models.FloatField(default=0, help_text='Route length in kilometers', validators=[django.core.validators.MinValueValidator(0)])),
                ('available_seats', models.PositiveIntegerField(default=1, help_text='Number of available seats', validators=[django.core.validators.MinValueValidator(0)])),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('date_added', models.DateTimeField(auto_now_add=True)),
                ('date_last_updated', models.DateTimeField(auto_now=True)),
                ('driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trips', to='trips.driver')),
                ('vehicle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trips', to='trips.vehicle')),
            ],
            options={
                'verbose_name': 'Trip',
                'verbose_name_plural': 'Trips',
                'ordering': ['-date_added'],
            },
        ),
        migrations.CreateModel(
            name='StopPoint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('label', models.CharField(blank=True, default='', max_length=255)),
                ('latitude', models.FloatField()),
                ('longitude', models.FloatField()),
                ('order', models.IntegerField(help_text='Position of the stop along the route')),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stop_points', to='trips.trip')),
            ],
            options={
                'ordering': ['order', 'id'],
            },
        ),
    ]
