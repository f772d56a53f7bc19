from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CompletionRecord',
            fields=[
                (
                    'video_id',
                    models.CharField(max_length=64, primary_key=True, serialize=False),
                ),
                ('title', models.CharField(blank=True, max_length=500)),
                ('storage_key', models.CharField(max_length=1024)),
                ('storage_bucket', models.CharField(max_length=255)),
                ('strategy', models.CharField(blank=True, max_length=32)),
                ('file_size', models.BigIntegerField(blank=True, null=True)),
                (
                    'completed_at',
                    models.DateTimeField(db_index=True, default=django.utils.timezone.now),
                ),
            ],
            options={
                'ordering': ['-completed_at'],
            },
        ),
    ]
