from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("notify", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="notificationchannel",
            name="kinds",
            field=models.JSONField(
                blank=True,
                default=list,
                help_text="Incident transitions to deliver (new, changed, resolved). Empty means all.",
            ),
        ),
    ]
