# accounts/forms.py

from django import forms
from django.contrib.auth.forms import UserChangeForm, UserCreationForm
from .models import CustomUser


class CustomUserCreationForm(UserCreationForm):
    class Meta:
        model = CustomUser
        fields = ('email', 'phone', 'first_name', 'last_name', 'user_type')

    def clean_phone(self):
        phone = (self.cleaned_data.get('phone') or '').strip()
        if phone and not phone.isdigit():
            raise forms.ValidationError("Phone number should contain digits only.")
        return phone or None


class CustomUserChangeForm(UserChangeForm):
    class Meta:
        model = CustomUser
        fields = ('email', 'phone', 'first_name', 'last_name', 'user_type', 'is_active', 'is_staff')
