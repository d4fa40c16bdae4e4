"""
Initial migration for Tailorman models.
"""

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

WASH_CHOICES = [
    ('STA', 'Stardust'),
    ('IND', 'Indigo'),
    ('ONX', 'Onyx'),
    ('JAG', 'Jagger'),
    ('RAW', 'Raw (light universal)'),
    ('BRW', 'Brown (dark universal)'),
]

STAGE_CHOICES = [
    ('PRODUCTION', 'Production'),
    ('STORAGE_QUEUE', 'Storage queue'),
    ('STOCK', 'Stock'),
    ('WASH_QUEUE', 'Wash queue'),
    ('WASHING', 'Washing'),
    ('LAUNDRY', 'Laundry'),
    ('QC', 'Quality control'),
    ('FINISHING', 'Finishing'),
    ('PACKING', 'Packing'),
    ('SHIPPING', 'Shipping'),
    ('FULFILLED', 'Fulfilled'),
    ('DEFECT', 'Defect'),
]


class Migration(migrations.Migration):
    """Create Tailorman models: Customer, Order, ProductionRequest, WaitlistEntry, Batch, Unit, ScanEvent, Bin."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CodeSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('prefix', models.CharField(max_length=50, unique=True, verbose_name='Prefix')),
                ('last_value', models.PositiveIntegerField(default=0, verbose_name='Last value')),
            ],
            options={
                'verbose_name': 'Code sequence',
                'verbose_name_plural': 'Code sequences',
                'db_table': 'tailorman_code_sequence',
            },
        ),
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='E-mail')),
                ('phone', models.CharField(blank=True, default='', max_length=50, verbose_name='Phone')),
                ('address', models.TextField(blank=True, default='', verbose_name='Address')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Customer',
                'verbose_name_plural': 'Customers',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Bin',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(help_text='QR payload printed on the bin', max_length=50, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('type', models.CharField(choices=[('STORAGE', 'Storage'), ('WASH', 'Wash')], db_index=True, default='STORAGE', max_length=20, verbose_name='Type')),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('INACTIVE', 'Inactive')], default='ACTIVE', max_length=20, verbose_name='Status')),
                ('zone', models.CharField(blank=True, default='', max_length=50, verbose_name='Zone')),
                ('wash', models.CharField(blank=True, choices=WASH_CHOICES, default='', help_text='Wash bins only: the wash this bin is loaded for', max_length=3, verbose_name='Wash')),
                ('capacity', models.PositiveIntegerField(verbose_name='Capacity')),
                ('current_count', models.PositiveIntegerField(default=0, verbose_name='Current count')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Bin',
                'verbose_name_plural': 'Bins',
                'ordering': ['created_at', 'pk'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('current_count__lte', models.F('capacity'))), name='bin_count_within_capacity'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(blank=True, max_length=50, unique=True, verbose_name='Code')),
                ('target_style', models.CharField(max_length=20, verbose_name='Style')),
                ('target_waist', models.PositiveSmallIntegerField(verbose_name='Waist')),
                ('target_shape', models.CharField(max_length=20, verbose_name='Shape')),
                ('target_length', models.PositiveSmallIntegerField(verbose_name='Length')),
                ('target_wash', models.CharField(choices=WASH_CHOICES, max_length=3, verbose_name='Wash')),
                ('hem_type', models.CharField(max_length=20, verbose_name='Hem type')),
                ('button_color', models.CharField(max_length=20, verbose_name='Button color')),
                ('status', models.CharField(choices=[('CREATED', 'Created'), ('COMMITTED', 'Committed'), ('ASSIGNED', 'Assigned')], db_index=True, default='CREATED', max_length=20, verbose_name='Status')),
                ('stage', models.CharField(blank=True, choices=STAGE_CHOICES, default='', help_text='Mirrors the bound unit', max_length=20, verbose_name='Stage')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='tailorman.customer', verbose_name='Customer')),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'ordering': ['created_at', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='ProductionRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(blank=True, max_length=50, unique=True, verbose_name='Code')),
                ('style', models.CharField(max_length=20, verbose_name='Style')),
                ('waist', models.PositiveSmallIntegerField(verbose_name='Waist')),
                ('shape', models.CharField(max_length=20, verbose_name='Shape')),
                ('length', models.PositiveSmallIntegerField(verbose_name='Length')),
                ('wash', models.CharField(choices=WASH_CHOICES, max_length=3, verbose_name='Wash')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('IN_PROGRESS', 'In progress'), ('COMPLETED', 'Completed')], db_index=True, default='PENDING', max_length=20, verbose_name='Status')),
                ('last_position', models.PositiveIntegerField(default=0, verbose_name='Last waitlist position')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('accepted_at', models.DateTimeField(blank=True, null=True, verbose_name='Accepted at')),
                ('completed_at', models.DateTimeField(blank=True, null=True, verbose_name='Completed at')),
            ],
            options={
                'verbose_name': 'Production request',
                'verbose_name_plural': 'Production requests',
                'ordering': ['created_at', 'pk'],
                'indexes': [
                    models.Index(fields=['style', 'waist', 'shape', 'wash', 'status'], name='tailorman_p_style_6b1c2e_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='WaitlistEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('position', models.PositiveIntegerField(verbose_name='Position')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='waitlist_entry', to='tailorman.order', verbose_name='Order')),
                ('production_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='waitlist', to='tailorman.productionrequest', verbose_name='Production request')),
            ],
            options={
                'verbose_name': 'Waitlist entry',
                'verbose_name_plural': 'Waitlist entries',
                'ordering': ['production_request', 'position'],
                'constraints': [
                    models.UniqueConstraint(fields=('production_request', 'position'), name='unique_waitlist_position'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(blank=True, max_length=50, unique=True, verbose_name='Batch code')),
                ('status', models.CharField(choices=[('IN_PROGRESS', 'In progress'), ('COMPLETED', 'Completed')], default='IN_PROGRESS', max_length=20, verbose_name='Status')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('completed_at', models.DateTimeField(blank=True, null=True, verbose_name='Completed at')),
                ('production_request', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='batch', to='tailorman.productionrequest', verbose_name='Production request')),
            ],
            options={
                'verbose_name': 'Batch',
                'verbose_name_plural': 'Batches',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='Unit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(blank=True, help_text='QR payload printed on the unit label', max_length=50, unique=True, verbose_name='Code')),
                ('style', models.CharField(max_length=20, verbose_name='Style')),
                ('waist', models.PositiveSmallIntegerField(verbose_name='Waist')),
                ('shape', models.CharField(max_length=20, verbose_name='Shape')),
                ('length', models.PositiveSmallIntegerField(verbose_name='Length')),
                ('wash', models.CharField(choices=WASH_CHOICES, max_length=3, verbose_name='Wash')),
                ('commitment', models.CharField(choices=[('UNCOMMITTED', 'Uncommitted'), ('COMMITTED', 'Committed'), ('ASSIGNED', 'Assigned')], db_index=True, default='UNCOMMITTED', max_length=20, verbose_name='Commitment')),
                ('stage', models.CharField(choices=STAGE_CHOICES, db_index=True, default='PRODUCTION', max_length=20, verbose_name='Stage')),
                ('location', models.CharField(blank=True, default='', max_length=100, verbose_name='Location')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='units', to='tailorman.batch', verbose_name='Batch')),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='units', to='tailorman.bin', verbose_name='Bin')),
                ('order', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='unit', to='tailorman.order', verbose_name='Order')),
                ('production_request', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='units', to='tailorman.productionrequest', verbose_name='Production request')),
            ],
            options={
                'verbose_name': 'Unit',
                'verbose_name_plural': 'Units',
                'ordering': ['created_at', 'pk'],
                'indexes': [
                    models.Index(fields=['style', 'waist', 'shape', 'wash', 'length'], name='tailorman_u_style_3f8a1d_idx'),
                    models.Index(fields=['commitment', 'stage'], name='tailorman_u_commitm_9c4e7b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ScanEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('ACTIVATION', 'Activation'), ('MOVEMENT', 'Movement'), ('SCAN_OUT', 'Wash bin scan-out'), ('REACTIVATE_FROM_LAUNDRY', 'Reactivate from laundry'), ('COMPLETION', 'Step completion'), ('DEFECT', 'Defect'), ('UNKNOWN', 'Unrecognized')], db_index=True, max_length=30, verbose_name='Type')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('location', models.CharField(blank=True, default='', max_length=100, verbose_name='Location')),
                ('success', models.BooleanField(verbose_name='Success')),
                ('error_code', models.CharField(blank=True, default='', max_length=50, verbose_name='Error code')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('unit', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='scan_events', to='tailorman.unit', verbose_name='Unit')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL, verbose_name='Operator')),
            ],
            options={
                'verbose_name': 'Scan event',
                'verbose_name_plural': 'Scan events',
                'ordering': ['timestamp', 'pk'],
                'indexes': [
                    models.Index(fields=['unit', 'timestamp'], name='tailorman_s_unit_id_5d2a90_idx'),
                ],
            },
        ),
    ]
