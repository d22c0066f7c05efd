import re

from django import forms

from apps.shipping.forms import DeliveryAddressForm
from apps.shipping.models import PickupLocation
from .models import Order

PHONE_DIGITS_RE = re.compile(r"^\+?[0-9]{9,15}$")


class CheckoutForm(forms.Form):
    # ---------- Client ----------
    customer_name = forms.CharField(label="Nom", max_length=120)
    customer_phone = forms.CharField(label="Téléphone", max_length=20)
    customer_email = forms.EmailField(label="Email")
    notes = forms.CharField(label="Notes", required=False)

    # ---------- Réception ----------
    delivery_type = forms.ChoiceField(
        label="Mode de réception",
        choices=Order.DELIVERY_CHOICES,
        initial=Order.DELIVERY_PICKUP,
    )
    pickup_location = forms.ModelChoiceField(
        label="Point de retrait",
        queryset=PickupLocation.objects.filter(is_active=True),
        required=False,
    )

    # Adresse, seulement pour Chronofresh
    street = forms.CharField(label="Adresse", max_length=220, required=False)
    postal_code = forms.CharField(label="Code postal", max_length=5, required=False)
    city = forms.CharField(label="Ville", max_length=120, required=False)
    instructions = forms.CharField(label="Instructions", max_length=500, required=False)

    def clean_customer_name(self):
        v = (self.cleaned_data.get("customer_name") or "").strip()
        if not v:
            raise forms.ValidationError("Le nom est obligatoire.")
        return v

    def clean_customer_phone(self):
        raw = (self.cleaned_data.get("customer_phone") or "").strip()
        phone = re.sub(r"[^\d+]", "", raw)
        if not PHONE_DIGITS_RE.match(phone):
            raise forms.ValidationError("Téléphone invalide.")
        return phone

    def clean_customer_email(self):
        return (self.cleaned_data.get("customer_email") or "").strip().lower()

    def clean(self):
        cleaned = super().clean()
        delivery_type = cleaned.get("delivery_type")

        if delivery_type == Order.DELIVERY_PICKUP:
            if not cleaned.get("pickup_location"):
                self.add_error("pickup_location", "Choisissez un point de retrait.")

        elif delivery_type == Order.DELIVERY_CHRONOFRESH:
            address = DeliveryAddressForm({
                "name": cleaned.get("customer_name", ""),
                "street": cleaned.get("street", ""),
                "postal_code": cleaned.get("postal_code", ""),
                "city": cleaned.get("city", ""),
                "phone": self.data.get("customer_phone", ""),
                "instructions": cleaned.get("instructions", ""),
            })
            if address.is_valid():
                cleaned["street"] = address.cleaned_data["street"]
                cleaned["postal_code"] = address.cleaned_data["postal_code"]
                cleaned["city"] = address.cleaned_data["city"]
            else:
                for field, errors in address.errors.items():
                    target = {"name": "customer_name", "phone": "customer_phone"}.get(field, field)
                    for error in errors:
                        if target in self.fields:
                            self.add_error(target, error)
        return cleaned
