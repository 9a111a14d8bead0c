from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.urls import NoReverseMatch, reverse
from django.utils.text import slugify


def unique_slug(instance, base, max_length=240):
    """Slugifies ``base`` and appends a counter until it is unique for the model."""
    slug_base = slugify(base)[:max_length] or 'item'
    slug = slug_base
    counter = 1
    qs = type(instance).objects.all()
    if instance.pk:
        qs = qs.exclude(pk=instance.pk)
    while qs.filter(slug=slug).exists():
        slug = f"{slug_base}-{counter}"
        counter += 1
    return slug


# -----------------------------
# Category
# -----------------------------
class Category(models.Model):
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    order = models.PositiveIntegerField(default=0, help_text="Defines order in navbar")
    image = models.ImageField(upload_to="category_images/", blank=True, null=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['order', 'name']
        verbose_name_plural = "Categories"
        indexes = [models.Index(fields=['order'])]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(self, self.name)
        super().save(*args, **kwargs)


# -----------------------------
# Sub-category
# -----------------------------
class SubCategory(models.Model):
    parent_category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="subcategories")
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    order = models.PositiveIntegerField(default=0)
    image = models.ImageField(upload_to="subcategory_images/", blank=True, null=True)

    class Meta:
        ordering = ['order', 'name']
        verbose_name_plural = "Sub-categories"

    def __str__(self):
        return f"{self.parent_category.name} / {self.name}"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(self, self.name)
        super().save(*args, **kwargs)


# -----------------------------
# Tax
# -----------------------------
class Tax(models.Model):
    tax_name = models.CharField(max_length=100, unique=True)
    tax_percent = models.DecimalField(
        max_digits=5, decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))])
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['tax_name']
        verbose_name_plural = "Taxes"

    def __str__(self):
        return f"{self.tax_name} ({self.tax_percent}%)"


# -----------------------------
# Service
# -----------------------------
class Service(models.Model):
    class DurationUnit(models.TextChoices):
        MINUTES = 'minutes', 'Minutes'
        HOURS = 'hours', 'Hours'
        DAYS = 'days', 'Days'

    sub_category = models.ForeignKey(SubCategory, on_delete=models.CASCADE, related_name="services")
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.TextField(blank=True, default="")
    image = models.ImageField(upload_to="service_images/", blank=True, null=True)

    price = models.DecimalField(max_digits=12, decimal_places=2,
                                validators=[MinValueValidator(Decimal('0.00'))],
                                help_text="Displayed price.")
    discounted_price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True,
                                           validators=[MinValueValidator(Decimal('0.00'))])
    is_tax_inclusive = models.BooleanField(default=False, help_text="Displayed prices already include tax.")
    tax = models.ForeignKey(Tax, on_delete=models.SET_NULL, blank=True, null=True, related_name="services")
    tax_name = models.CharField(max_length=100, blank=True)
    tax_percent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))

    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    review_count = models.PositiveIntegerField(default=0)
    task_time_value = models.PositiveIntegerField(blank=True, null=True)
    task_time_unit = models.CharField(max_length=10, choices=DurationUnit.choices, blank=True)
    allow_pay_later = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        indexes = [models.Index(fields=['slug']), models.Index(fields=['is_active'])]

    def __str__(self):
        return f"{self.sub_category.name} - {self.name}"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(self, self.name)
        # Keep a copy of the tax terms on the service itself
        if self.tax_id:
            self.tax_name = self.tax.tax_name
            self.tax_percent = self.tax.tax_percent
        else:
            self.tax_name = ''
            self.tax_percent = Decimal('0.00')
        super().save(*args, **kwargs)

    def get_absolute_url(self):
        try:
            return reverse('catalog:service_detail', kwargs={'slug': self.slug})
        except NoReverseMatch:
            return '#'

    @property
    def category_id(self):
        return self.sub_category.parent_category_id

    @property
    def displayed_price(self):
        if self.discounted_price is not None and self.discounted_price < self.price:
            return self.discounted_price
        return self.price

    @property
    def task_time(self):
        if not self.task_time_value or not self.task_time_unit:
            return ''
        return f"{self.task_time_value} {self.get_task_time_unit_display().lower()}"
