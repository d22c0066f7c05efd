import re

from django import forms

from .services import is_valid_postal_code

FRENCH_PHONE_RE = re.compile(r"^(\+33|0)[1-9][0-9]{8}$")


class DeliveryAddressForm(forms.Form):
    name = forms.CharField(label="Nom", max_length=120)
    street = forms.CharField(label="Adresse", max_length=220)
    postal_code = forms.CharField(label="Code postal", max_length=5)
    city = forms.CharField(label="Ville", max_length=120)
    phone = forms.CharField(label="Téléphone", max_length=20)
    instructions = forms.CharField(label="Instructions", required=False, max_length=500)

    def clean_name(self):
        v = (self.cleaned_data.get("name") or "").strip()
        if len(v) < 2:
            raise forms.ValidationError("Le nom est requis (minimum 2 caractères).")
        return v

    def clean_street(self):
        v = (self.cleaned_data.get("street") or "").strip()
        if len(v) < 5:
            raise forms.ValidationError("L'adresse est requise (minimum 5 caractères).")
        return v

    def clean_postal_code(self):
        v = (self.cleaned_data.get("postal_code") or "").strip()
        if not is_valid_postal_code(v):
            raise forms.ValidationError("Le code postal doit contenir 5 chiffres.")
        return v

    def clean_city(self):
        v = (self.cleaned_data.get("city") or "").strip()
        if len(v) < 2:
            raise forms.ValidationError("La ville est requise (minimum 2 caractères).")
        return v

    def clean_phone(self):
        raw = self.cleaned_data.get("phone") or ""
        phone = re.sub(r"\s", "", raw)
        if not FRENCH_PHONE_RE.match(phone):
            raise forms.ValidationError("Le numéro de téléphone est invalide.")
        return phone
