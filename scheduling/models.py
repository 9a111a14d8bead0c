from django.db import models

from catalog.models import Category


class TimeSlotCategoryLimit(models.Model):
    """How many bookings of one category may share a single time slot."""

    category = models.OneToOneField(Category, on_delete=models.CASCADE, related_name='slot_limit')
    max_concurrent_bookings = models.PositiveIntegerField(default=0, help_text="0 means unlimited.")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['category__name']

    def __str__(self):
        limit = self.max_concurrent_bookings or "unlimited"
        return f"{self.category.name}: {limit}"
