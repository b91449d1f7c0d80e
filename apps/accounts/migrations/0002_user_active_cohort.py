import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
        ('learn', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='user',
            name='active_cohort',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='active_learners', to='learn.cohort'),
        ),
    ]
