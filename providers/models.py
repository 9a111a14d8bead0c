# providers/models.py

from decimal import Decimal

from django.conf import settings
from django.db import models

from catalog.models import Category

User = settings.AUTH_USER_MODEL


class ProviderApplication(models.Model):
    """
    A service professional's onboarding request, filled in over four steps
    and reviewed by staff.
    """
    class Status(models.TextChoices):
        PENDING_STEP_1 = 'pending_step_1', 'Step 1: Work category & skills'
        PENDING_STEP_2 = 'pending_step_2', 'Step 2: Personal information'
        PENDING_STEP_3 = 'pending_step_3', 'Step 3: KYC documents'
        PENDING_STEP_4 = 'pending_step_4', 'Step 4: Location & bank details'
        PENDING_REVIEW = 'pending_review', 'Pending review'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'
        NEEDS_UPDATE = 'needs_update', 'Needs update'

    class ExperienceLevel(models.TextChoices):
        FRESHER = 'fresher', 'Fresher'
        ONE_TO_THREE = '1-3', '1-3 years'
        THREE_TO_FIVE = '3-5', '3-5 years'
        FIVE_PLUS = '5+', '5+ years'

    class SkillLevel(models.TextChoices):
        BASIC = 'basic', 'Basic'
        INTERMEDIATE = 'intermediate', 'Intermediate'
        EXPERT = 'expert', 'Expert'

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='provider_application')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING_STEP_1, db_index=True)

    # Step 1
    work_category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True,
                                      related_name='provider_applications')
    experience_level = models.CharField(max_length=10, choices=ExperienceLevel.choices, blank=True)
    skill_level = models.CharField(max_length=15, choices=SkillLevel.choices, blank=True)

    # Step 2
    full_name = models.CharField(max_length=150, blank=True)
    email = models.EmailField(blank=True)
    mobile_number = models.CharField(max_length=15, blank=True)
    alternate_mobile = models.CharField(max_length=15, blank=True)
    address = models.TextField(blank=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    qualification = models.CharField(max_length=100, blank=True)
    languages_spoken = models.CharField(max_length=255, blank=True, help_text="Comma separated.")
    profile_photo = models.ImageField(upload_to='provider_photos/', blank=True, null=True)

    # Step 3
    aadhaar_number = models.CharField(max_length=12, blank=True)
    pan_number = models.CharField(max_length=10, blank=True)

    # Step 4
    work_pin_codes = models.JSONField(default=list, blank=True)
    bank_account_holder_name = models.CharField(max_length=150, blank=True)
    bank_account_number = models.CharField(max_length=30, blank=True)
    bank_ifsc_code = models.CharField(max_length=11, blank=True)
    bank_name = models.CharField(max_length=100, blank=True)
    terms_confirmed_at = models.DateTimeField(null=True, blank=True)

    admin_review_notes = models.TextField(blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Application from {self.full_name or self.user} ({self.get_status_display()})"

    @property
    def current_step(self):
        for step, status in enumerate((self.Status.PENDING_STEP_1, self.Status.PENDING_STEP_2,
                                       self.Status.PENDING_STEP_3, self.Status.PENDING_STEP_4), start=1):
            if self.status == status:
                return step
        return None


class ProviderProfile(models.Model):
    """The working profile of an approved provider."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='provider_profile')
    provider_id = models.CharField(max_length=20, unique=True, blank=True, editable=False)
    application = models.OneToOneField(ProviderApplication, on_delete=models.SET_NULL, null=True, blank=True,
                                       related_name='profile')
    work_category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True,
                                      related_name='providers')
    work_pin_codes = models.JSONField(default=list, blank=True)
    is_available = models.BooleanField(default=True)
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    total_jobs_completed = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user.get_full_name() or self.user.email} ({self.provider_id or 'No ID'})"

    def save(self, *args, **kwargs):
        from .utils import generate_provider_id
        if not self.provider_id:
            self.provider_id = generate_provider_id()
        super().save(*args, **kwargs)
