# Generated manually for the initial portal schema

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

DEPARTMENT_CHOICES = [('financial', 'Financial'), ('graphic_design', 'Graphic Design'), ('developers', 'Developers'), ('advertising', 'Advertising'), ('compliance', 'Compliance'), ('management', 'Management'), ('records_management', 'Records Management')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DepartmentMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sender_department', models.CharField(choices=DEPARTMENT_CHOICES, max_length=30)),
                ('recipient_department', models.CharField(choices=DEPARTMENT_CHOICES, max_length=30)),
                ('message', models.TextField()),
                ('read', models.BooleanField(default=False)),
                ('attachment_path', models.CharField(blank=True, max_length=500, null=True)),
                ('attachment_name', models.CharField(blank=True, max_length=255, null=True)),
                ('attachment_size', models.BigIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('sender', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='department_messages_sent', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'department_messages',
                'ordering': ['created_at'],
                'indexes': [models.Index(fields=['recipient_department', 'read'], name='department__recipie_2f8c1a_idx')],
            },
        ),
    ]
