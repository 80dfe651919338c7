import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CourseType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("state", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive")], default="active", max_length=10)),
                ("payment_modality", models.CharField(choices=[("monthly", "Monthly"), ("per_session", "Per Session")], default="monthly", max_length=20)),
                ("session_count", models.PositiveIntegerField(default=0)),
                ("session_price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("requires_certificate", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CourseSection",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("capacity", models.PositiveIntegerField()),
                ("seats_available", models.PositiveIntegerField()),
                ("schedule", models.CharField(max_length=50)),
                ("start_date", models.DateField()),
                ("state", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive")], default="active", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("course_type", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sections", to="enrollments.coursetype")),
            ],
            options={
                "ordering": ["start_date", "id"],
                "indexes": [
                    models.Index(fields=["course_type", "schedule", "state", "start_date"], name="section_match_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("seats_available__lte", models.F("capacity"))), name="section_seats_within_capacity"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Promotion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("quota_limit", models.PositiveIntegerField(blank=True, null=True)),
                ("quota_used", models.PositiveIntegerField(default=0)),
                ("active", models.BooleanField(default=True)),
                ("valid_from", models.DateTimeField(blank=True, null=True)),
                ("valid_to", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("principal_section", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="promotions_offered", to="enrollments.coursesection")),
                ("promotional_section", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="promotions_granted", to="enrollments.coursesection")),
            ],
            options={
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quota_limit__isnull", True), ("quota_used__lte", models.F("quota_limit")), _connector="OR"),
                        name="promotion_quota_within_limit",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("principal_section", models.F("promotional_section")), _negated=True),
                        name="promotion_sections_differ",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EnrollmentRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=30, unique=True)),
                ("identification", models.CharField(max_length=30)),
                ("first_name", models.CharField(blank=True, max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("existing_student_id", models.PositiveIntegerField(blank=True, null=True)),
                ("emergency_contact", models.CharField(blank=True, max_length=200)),
                ("schedule", models.CharField(blank=True, max_length=50)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_method", models.CharField(choices=[("transfer", "Transfer"), ("cash", "Cash")], max_length=20)),
                ("proof_reference", models.CharField(blank=True, max_length=60, null=True, unique=True)),
                ("bank", models.CharField(blank=True, max_length=100)),
                ("transfer_date", models.DateField(blank=True, null=True)),
                ("received_by", models.CharField(blank=True, max_length=100)),
                ("payment_proof_ref", models.CharField(blank=True, max_length=500)),
                ("identity_document_ref", models.CharField(blank=True, max_length=500)),
                ("legal_status_document_ref", models.CharField(blank=True, max_length=500)),
                ("certificate_ref", models.CharField(blank=True, max_length=500)),
                ("state", models.CharField(choices=[("pending", "Pending"), ("observations", "Observations"), ("approved", "Approved"), ("rejected", "Rejected")], default="pending", max_length=20)),
                ("reviewer_id", models.CharField(blank=True, max_length=64, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("course_type", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="requests", to="enrollments.coursetype")),
                ("section", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="requests", to="enrollments.coursesection")),
                ("promotion", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="requests", to="enrollments.promotion")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["section", "state"], name="request_section_state_idx"),
                    models.Index(fields=["promotion", "state"], name="request_promotion_state_idx"),
                    models.Index(fields=["state", "-created_at"], name="request_state_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("student_id", models.CharField(max_length=30)),
                ("state", models.CharField(choices=[("active", "Active"), ("suspended", "Suspended"), ("finished", "Finished"), ("cancelled", "Cancelled")], default="active", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("section", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="enrollments", to="enrollments.coursesection")),
                ("request", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="enrollments", to="enrollments.enrollmentrequest")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["section", "state"], name="enrollment_section_state_idx"),
                    models.Index(fields=["student_id", "state"], name="enrollment_student_state_idx"),
                ],
            },
        ),
    ]
