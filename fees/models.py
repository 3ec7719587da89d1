from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import models


class FeeDefinition(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
    ]
    CATEGORY_CHOICES = [
        ("tuition", "Tuition"),
        ("exam", "Exam"),
        ("library", "Library"),
        ("sports", "Sports"),
        ("other", "Other"),
    ]

    name = models.CharField(max_length=128)
    description = models.TextField(blank=True)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES, default="tuition")
    due_date = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["due_date", "name"]

    def __str__(self):
        return f"{self.name} ({self.amount})"

    @property
    def is_payable(self):
        return self.status == self.STATUS_ACTIVE and self.amount is not None and self.amount > 0
