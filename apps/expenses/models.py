from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class SplitStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    SETTLED = 'settled', 'Settled'


class ExpenseCategory(models.TextChoices):
    RENT = 'rent', 'Rent'
    UTILITIES = 'utilities', 'Utilities'
    GROCERIES = 'groceries', 'Groceries'
    HOUSEHOLD = 'household', 'Household'
    OTHER = 'other', 'Other'


class Expense(models.Model):
    """Shared household expense paid by one member."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    household = models.ForeignKey(
        'households.Household',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    paid_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expenses_paid'
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expenses_created'
    )

    description = models.CharField(max_length=255)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    category = models.CharField(
        max_length=20,
        choices=ExpenseCategory.choices,
        default=ExpenseCategory.OTHER
    )
    date = models.DateField(default=timezone.localdate)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['household', 'date'], name='expenses_household_date_idx'),
            models.Index(fields=['paid_by'], name='expenses_paid_by_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.description} - {self.total_amount}"


class ExpenseSplitQuerySet(models.QuerySet):

    def pending(self):
        return self.filter(status=SplitStatus.PENDING)


class ExpenseSplit(models.Model):
    """Portion of an expense owed by one member to the payer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='splits'
    )
    owed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expense_splits'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=SplitStatus.choices,
        default=SplitStatus.PENDING
    )
    settled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = ExpenseSplitQuerySet.as_manager()

    class Meta:
        db_table = 'expense_splits'
        indexes = [
            models.Index(fields=['owed_by', 'status'], name='splits_owed_by_status_idx'),
            models.Index(fields=['expense', 'status'], name='splits_expense_status_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.owed_by.get_display_name()} owes {self.amount} ({self.status})"

    def mark_settled(self):
        """Mark split as settled. Already settled splits are left untouched."""
        if self.status == SplitStatus.SETTLED:
            return False

        self.status = SplitStatus.SETTLED
        self.settled_at = timezone.now()
        self.save(update_fields=['status', 'settled_at'])
        return True
