from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ExamPaperModel",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.CharField(max_length=36, primary_key=True, serialize=False)),
                ("subject_code", models.CharField(db_index=True, max_length=16)),
                ("subject_name", models.CharField(max_length=255)),
                ("department_name", models.CharField(db_index=True, max_length=255)),
                ("semester", models.PositiveSmallIntegerField()),
                ("academic_year", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Submitted", "Submitted"),
                            ("SubjectApproved", "Subject Approved"),
                            ("BoardApproved", "Board Approved"),
                            ("Locked", "Locked"),
                            ("Distributed", "Distributed"),
                            ("CorrectionRequested", "Correction Requested"),
                        ],
                        db_index=True,
                        default="Submitted",
                        max_length=32,
                    ),
                ),
                ("storage_folder_path", models.CharField(blank=True, default="", max_length=512)),
                ("qp_file_url", models.URLField(blank=True, default="", max_length=1024)),
                ("qp_file_type", models.CharField(blank=True, default="", max_length=128)),
                ("scheme_file_url", models.URLField(blank=True, default="", max_length=1024)),
                ("scheme_file_type", models.CharField(blank=True, default="", max_length=128)),
                ("uploaded_by", models.CharField(db_index=True, max_length=64)),
                ("approved_by", models.CharField(blank=True, max_length=64, null=True)),
                ("locked_by", models.CharField(blank=True, max_length=64, null=True)),
                ("acted_by", models.CharField(blank=True, max_length=64, null=True)),
                ("exam_date", models.DateField(blank=True, db_index=True, null=True)),
                ("is_downloaded", models.BooleanField(default=False)),
                ("downloaded_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "db_table": "papers_exam_paper",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["department_name", "status"], name="papers_dept_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaperDownloadModel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("distributor_id", models.CharField(max_length=64)),
                ("subject_code", models.CharField(max_length=16)),
                ("exam_date", models.DateField()),
                ("downloaded_at", models.DateTimeField()),
                (
                    "paper",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="downloads",
                        to="papers.exampapermodel",
                    ),
                ),
            ],
            options={
                "db_table": "papers_paper_download",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("distributor_id", "subject_code", "exam_date"),
                        name="uniq_paper_download_per_distributor",
                    ),
                ],
            },
        ),
    ]
