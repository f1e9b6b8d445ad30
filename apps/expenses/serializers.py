from rest_framework import serializers
from .models import Expense, ExpenseSplit, ExpenseCategory
from apps.accounts.models import User


# =============================================================================
# Input Serializers
# =============================================================================

class SplitInputSerializer(serializers.Serializer):
    """One explicit split: who owes how much."""

    owed_by_id = serializers.UUIDField(required=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Validate input for creating an expense.

    Fields:
        description (str): What was paid for
        total_amount (Decimal): Expense total
        paid_by_id (UUID): Optional payer, defaults to the caller
        date (date): Optional expense date, defaults to today
        category (str): Optional category, defaults to ``other``
        splits (list): Optional explicit splits; omitted means equal split
    """

    description = serializers.CharField(max_length=255)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_by_id = serializers.UUIDField(required=False, allow_null=True)
    date = serializers.DateField(required=False, allow_null=True)
    category = serializers.ChoiceField(
        choices=ExpenseCategory.choices,
        required=False,
        default=ExpenseCategory.OTHER
    )
    splits = SplitInputSerializer(many=True, required=False)


class ExpenseUpdateSerializer(serializers.Serializer):
    """Partial edit of an expense; splits cannot be changed here."""

    description = serializers.CharField(max_length=255, required=False)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    date = serializers.DateField(required=False)
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, required=False)


# =============================================================================
# Output Serializers
# =============================================================================


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name']
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_display_name()


class ExpenseSplitSerializer(serializers.ModelSerializer):

    owed_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = ExpenseSplit
        fields = ['id', 'expense', 'owed_by', 'amount', 'status', 'settled_at', 'created_at']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """Expense with payer, creator and splits."""

    paid_by = UserMinimalSerializer(read_only=True)
    created_by = UserMinimalSerializer(read_only=True)
    splits = ExpenseSplitSerializer(many=True, read_only=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'household',
            'description',
            'total_amount',
            'category',
            'date',
            'paid_by',
            'created_by',
            'splits',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BalancesSerializer(serializers.Serializer):
    """Outstanding totals; debts keyed by payer id, credits keyed by ower id."""

    you_owe = serializers.DecimalField(max_digits=12, decimal_places=2)
    you_are_owed = serializers.DecimalField(max_digits=12, decimal_places=2)
    debts = serializers.DictField(child=serializers.DecimalField(max_digits=12, decimal_places=2))
    credits = serializers.DictField(child=serializers.DecimalField(max_digits=12, decimal_places=2))


class SettleWithUserResponseSerializer(serializers.Serializer):

    message = serializers.CharField()
    settled_count = serializers.IntegerField()
