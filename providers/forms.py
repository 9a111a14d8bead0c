# providers/forms.py
import re

from django import forms

from catalog.models import Category

from .models import ProviderApplication
from .utils import parse_pin_codes


class WorkCategoryForm(forms.ModelForm):
    """Step 1: what the provider does."""
    work_category = forms.ModelChoiceField(queryset=Category.objects.filter(is_active=True))

    class Meta:
        model = ProviderApplication
        fields = ['work_category', 'experience_level', 'skill_level']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['experience_level'].required = True
        self.fields['skill_level'].required = True


class PersonalInfoForm(forms.ModelForm):
    """Step 2."""
    age = forms.IntegerField(min_value=18, max_value=70)

    class Meta:
        model = ProviderApplication
        fields = ['full_name', 'email', 'mobile_number', 'alternate_mobile', 'address',
                  'age', 'qualification', 'languages_spoken']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ('full_name', 'email', 'mobile_number', 'address'):
            self.fields[name].required = True

    def clean_mobile_number(self):
        mobile = self.cleaned_data['mobile_number'].strip()
        if not re.fullmatch(r'\d{10}', mobile):
            raise forms.ValidationError("Enter a valid 10-digit mobile number.")
        return mobile


class KycForm(forms.ModelForm):
    """Step 3."""
    aadhaar_number = forms.CharField(max_length=14)

    class Meta:
        model = ProviderApplication
        fields = ['aadhaar_number', 'pan_number']

    def clean_aadhaar_number(self):
        aadhaar = self.cleaned_data['aadhaar_number'].replace(' ', '')
        if not re.fullmatch(r'\d{12}', aadhaar):
            raise forms.ValidationError("Aadhaar number must be 12 digits.")
        return aadhaar

    def clean_pan_number(self):
        pan = self.cleaned_data['pan_number'].strip().upper()
        if not re.fullmatch(r'[A-Z]{5}\d{4}[A-Z]', pan):
            raise forms.ValidationError("Enter a valid PAN number.")
        return pan


class LocationBankForm(forms.ModelForm):
    """Step 4: where the provider works and how they are paid."""
    work_pin_codes = forms.CharField(help_text="Comma separated 6-digit PIN codes.")
    accept_terms = forms.BooleanField(required=True)

    class Meta:
        model = ProviderApplication
        fields = ['work_pin_codes', 'bank_account_holder_name', 'bank_account_number',
                  'bank_ifsc_code', 'bank_name']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ('bank_account_holder_name', 'bank_account_number', 'bank_ifsc_code', 'bank_name'):
            self.fields[name].required = True

    def clean_work_pin_codes(self):
        pins = parse_pin_codes(self.cleaned_data['work_pin_codes'])
        if not pins:
            raise forms.ValidationError("Select at least one PIN code.")
        invalid = [pin for pin in pins if not re.fullmatch(r'\d{6}', pin)]
        if invalid:
            raise forms.ValidationError(f"Invalid PIN code(s): {', '.join(invalid)}")
        return pins

    def clean_bank_ifsc_code(self):
        ifsc = self.cleaned_data['bank_ifsc_code'].strip().upper()
        if not re.fullmatch(r'[A-Z]{4}0[A-Z0-9]{6}', ifsc):
            raise forms.ValidationError("Enter a valid IFSC code.")
        return ifsc


STEP_FORMS = {
    1: WorkCategoryForm,
    2: PersonalInfoForm,
    3: KycForm,
    4: LocationBankForm,
}
