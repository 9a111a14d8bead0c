import re

from django import forms


class CheckoutAddressForm(forms.Form):
    full_name = forms.CharField(max_length=150)
    email = forms.EmailField()
    phone = forms.CharField(max_length=15)
    address_line1 = forms.CharField(max_length=255)
    address_line2 = forms.CharField(max_length=255, required=False)
    city = forms.CharField(max_length=100)
    state = forms.CharField(max_length=100)
    pincode = forms.CharField(max_length=10)
    latitude = forms.DecimalField(max_digits=9, decimal_places=6, required=False, min_value=-90, max_value=90)
    longitude = forms.DecimalField(max_digits=9, decimal_places=6, required=False, min_value=-180, max_value=180)

    def clean_phone(self):
        phone = re.sub(r'[\s-]', '', self.cleaned_data['phone'])
        if phone.startswith('+91'):
            phone = phone[3:]
        if not re.fullmatch(r'\d{10}', phone):
            raise forms.ValidationError("Enter a valid 10-digit mobile number.")
        return phone

    def clean_pincode(self):
        pincode = self.cleaned_data['pincode'].strip()
        if not re.fullmatch(r'\d{6}', pincode):
            raise forms.ValidationError("Enter a valid 6-digit PIN code.")
        return pincode

    def session_data(self):
        """Cleaned data in a JSON-serialisable shape for the session."""
        data = dict(self.cleaned_data)
        for key in ('latitude', 'longitude'):
            data[key] = str(data[key]) if data.get(key) is not None else None
        return data
