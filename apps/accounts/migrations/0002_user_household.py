# Generated manually for household core

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('accounts', '0001_initial'),
        ('households', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='user',
            name='household',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='members', to='households.household'),
        ),
        migrations.AddIndex(
            model_name='user',
            index=models.Index(fields=['household', 'role'], name='users_household_role_idx'),
        ),
    ]
