from django import forms
from .models import FeeDefinition


class FeeDefinitionForm(forms.ModelForm):
    class Meta:
        model = FeeDefinition
        fields = ["name", "amount", "category", "due_date", "description"]
        widgets = {
            "due_date": forms.DateInput(attrs={"type": "date"}),
            "description": forms.Textarea(attrs={"rows": 3}),
        }

    def clean_amount(self):
        amount = self.cleaned_data["amount"]
        if amount is None or amount <= 0:
            raise forms.ValidationError("Amount must be greater than zero.")
        return amount
