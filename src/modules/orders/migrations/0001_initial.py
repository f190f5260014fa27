from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("user_uid", models.CharField(db_index=True, max_length=255)),
                ("pickup_address", models.TextField()),
                ("dropoff_address", models.TextField()),
                ("lat_pickup", models.DecimalField(decimal_places=8, max_digits=10)),
                ("lng_pickup", models.DecimalField(decimal_places=8, max_digits=11)),
                ("lat_dropoff", models.DecimalField(decimal_places=8, max_digits=10)),
                ("lng_dropoff", models.DecimalField(decimal_places=8, max_digits=11)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "order_type",
                    models.CharField(
                        choices=[
                            ("delivery", "Delivery"),
                            ("pickup", "Pickup"),
                            ("express", "Express"),
                            ("scheduled", "Scheduled"),
                        ],
                        max_length=100,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("in_progress", "In progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["-created_at"], name="orders_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="orders_amount_positive",
                    ),
                ],
            },
        ),
    ]
