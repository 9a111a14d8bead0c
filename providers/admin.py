# providers/admin.py
from django.contrib import admin, messages
from django.urls import reverse
from django.utils.html import format_html
from import_export.admin import ImportExportModelAdmin

from bookings.services import provider_earnings

from .exceptions import ProviderApplicationError
from .models import ProviderApplication, ProviderProfile
from .services import approve_application, reject_application, request_application_update


@admin.register(ProviderApplication)
class ProviderApplicationAdmin(ImportExportModelAdmin):
    list_display = ('full_name', 'email', 'mobile_number', 'work_category', 'status', 'submitted_at')
    list_filter = ('status', 'work_category', 'experience_level')
    search_fields = ('full_name', 'email', 'mobile_number', 'user__email')
    readonly_fields = ('user', 'submitted_at', 'terms_confirmed_at', 'created_at', 'updated_at')
    actions = ['approve_selected', 'reject_selected', 'request_update_for_selected']
    fieldsets = (
        (None, {'fields': ('user', 'status', 'admin_review_notes')}),
        ('Work Category & Skills', {'fields': ('work_category', 'experience_level', 'skill_level')}),
        ('Personal Information', {'fields': (
            'full_name', ('email', 'mobile_number', 'alternate_mobile'), 'address', 'age',
            'qualification', 'languages_spoken', 'profile_photo')}),
        ('KYC', {'fields': ('aadhaar_number', 'pan_number')}),
        ('Location & Bank', {'fields': (
            'work_pin_codes', 'bank_account_holder_name', 'bank_account_number',
            'bank_ifsc_code', 'bank_name', 'terms_confirmed_at')}),
        ('Dates', {'fields': ('submitted_at', 'created_at', 'updated_at')}),
    )

    def _run(self, request, queryset, action, verb):
        done = 0
        for application in queryset:
            try:
                action(application)
            except ProviderApplicationError as exc:
                self.message_user(request, f"{application}: {exc.message}", level=messages.ERROR)
            else:
                done += 1
        if done:
            self.message_user(request, f"Successfully {verb} {done} application(s).")

    def approve_selected(self, request, queryset):
        self._run(request, queryset, approve_application, "approved")
    approve_selected.short_description = "Approve selected applications"

    def reject_selected(self, request, queryset):
        self._run(request, queryset, reject_application, "rejected")
    reject_selected.short_description = "Reject selected applications"

    def request_update_for_selected(self, request, queryset):
        self._run(request, queryset, request_application_update, "sent back")
    request_update_for_selected.short_description = "Ask applicants to update their application"


@admin.register(ProviderProfile)
class ProviderProfileAdmin(ImportExportModelAdmin):
    list_display = ('provider_id', 'user_full_name', 'user_email', 'work_category', 'is_available',
                    'rating', 'total_jobs_completed', 'earnings')
    list_filter = ('is_available', 'work_category')
    search_fields = ('provider_id', 'user__email', 'user__first_name', 'user__last_name')
    readonly_fields = ('provider_id', 'total_jobs_completed', 'view_jobs_link', 'created_at')

    @admin.display(description='Provider Name', ordering='user__first_name')
    def user_full_name(self, obj):
        return obj.user.get_full_name() or obj.user.email

    @admin.display(description='Email')
    def user_email(self, obj):
        return obj.user.email

    @admin.display(description='Earnings')
    def earnings(self, obj):
        return f"₹{provider_earnings(obj)['total_earnings']}"

    @admin.display(description='Jobs')
    def view_jobs_link(self, obj):
        count = obj.bookings.count()
        if count == 0:
            return "No jobs assigned."
        url = reverse("admin:bookings_booking_changelist") + f"?provider__id__exact={obj.pk}"
        return format_html('<a href="{}">View {} Jobs</a>', url, count)
