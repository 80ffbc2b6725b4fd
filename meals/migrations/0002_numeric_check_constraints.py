from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("meals", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="mealitem",
            constraint=models.CheckConstraint(condition=models.Q(quantity__gt=0), name="mealitem_quantity_positive"),
        ),
        migrations.AddConstraint(
            model_name="mealitem",
            constraint=models.CheckConstraint(
                condition=models.Q(calories__gte=0), name="mealitem_calories_non_negative"
            ),
        ),
        migrations.AddConstraint(
            model_name="mealitem",
            constraint=models.CheckConstraint(
                condition=models.Q(protein__gte=0, carbs__gte=0, fat__gte=0),
                name="mealitem_macros_non_negative",
            ),
        ),
        migrations.AddConstraint(
            model_name="mealitem",
            constraint=models.CheckConstraint(
                condition=models.Q(confidence__isnull=True) | models.Q(confidence__gte=0, confidence__lte=1),
                name="mealitem_confidence_range",
            ),
        ),
        migrations.AddConstraint(
            model_name="dailystats",
            constraint=models.CheckConstraint(
                condition=models.Q(total_calories__gte=0), name="dailystats_total_non_negative"
            ),
        ),
        migrations.AddConstraint(
            model_name="dailystats",
            constraint=models.CheckConstraint(
                condition=models.Q(meals_logged__gte=0), name="dailystats_meals_non_negative"
            ),
        ),
    ]
