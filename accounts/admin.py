from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .forms import CustomUserChangeForm, CustomUserCreationForm
from .models import CustomUser
from bookings.models import Booking
from import_export.admin import ImportExportModelAdmin


class BookingInline(admin.TabularInline):
    """
    Displays a user's booking history on their detail page.
    """
    model = Booking
    fk_name = 'user'
    extra = 0

    fields = ('booking_id', 'scheduled_date', 'scheduled_time_slot', 'status', 'total_amount')
    readonly_fields = fields

    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CustomUser)
class CustomUserAdmin(ImportExportModelAdmin, UserAdmin):
    model = CustomUser
    form = CustomUserChangeForm
    add_form = CustomUserCreationForm

    list_display = ('email', 'customer_id', 'first_name', 'last_name', 'phone', 'user_type', 'is_staff', 'is_active', 'date_joined')
    list_filter = ('is_staff', 'is_active', 'user_type')
    ordering = ('-date_joined',)
    search_fields = ('customer_id', 'email', 'phone', 'first_name', 'last_name')

    inlines = [BookingInline]

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal info', {'fields': ('customer_id', 'first_name', 'last_name', 'phone')}),
        ('Permissions', {'fields': ('is_staff', 'is_active', 'is_superuser', 'user_type', 'groups', 'user_permissions')}),
        ('Important dates', {'fields': ('date_joined', 'last_login_at')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'phone', 'first_name', 'last_name', 'user_type', 'password1', 'password2')}
        ),
    )

    readonly_fields = ('customer_id', 'date_joined', 'last_login_at')
