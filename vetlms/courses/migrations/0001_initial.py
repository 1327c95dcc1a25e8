from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=500)),
                ('description', models.TextField(blank=True, null=True)),
                ('category', models.CharField(blank=True, max_length=100, null=True)),
                ('content_type', models.CharField(choices=[('video', 'Video'), ('pdf', 'PDF'), ('powerpoint', 'PowerPoint'), ('scorm', 'SCORM'), ('other', 'Other')], default='video', max_length=20)),
                ('content_url', models.CharField(blank=True, max_length=500, null=True)),
                ('content_url_en', models.CharField(blank=True, max_length=500, null=True)),
                ('content_url_es', models.CharField(blank=True, max_length=500, null=True)),
                ('content_url_ne', models.CharField(blank=True, max_length=500, null=True)),
                ('duration_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('pass_percentage', models.PositiveSmallIntegerField(default=80)),
                ('is_mandatory', models.BooleanField(default=False)),
                ('is_published', models.BooleanField(default=False)),
                ('assigned_departments', models.JSONField(blank=True, default=list)),
                ('assigned_positions', models.JSONField(blank=True, default=list)),
                ('assign_to_entire_company', models.BooleanField(default=False)),
                ('exception_positions', models.JSONField(blank=True, default=list)),
                ('is_active', models.BooleanField(default=True)),
                ('quiz_questions', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, db_column='created_by', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_courses', to='accounts.profile')),
                ('location', models.ForeignKey(db_column='location_id', on_delete=django.db.models.deletion.CASCADE, related_name='courses', to='accounts.location')),
                ('organization', models.ForeignKey(db_column='organization_id', on_delete=django.db.models.deletion.CASCADE, related_name='courses', to='accounts.organization')),
            ],
            options={
                'db_table': 'courses',
                'ordering': ['-created_at'],
            },
        ),
    ]
