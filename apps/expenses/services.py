"""
Expense Services Module
=======================

This module provides business logic for the household expense ledger:
recording expenses, splitting them between members, settling splits and
computing per-user balances.

Classes:
    ExpenseLedgerService: Expense creation, settlement and balances.

Example:
    Recording a rent payment split equally::

        from apps.expenses.services import ExpenseLedgerService
        from decimal import Decimal

        expense = ExpenseLedgerService.create_expense(
            created_by=current_user,
            description='Rent',
            total_amount=Decimal('900.00'),
        )

        # In a three-member household both non-payers owe 300.00
        for split in expense.splits.all():
            print(f"{split.owed_by.email}: {split.amount}")
"""

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from django.db import transaction
from django.db.models import Q

from apps.accounts.models import User
from apps.notifications import events
from .models import Expense, ExpenseSplit, ExpenseCategory, SplitStatus
from .exceptions import (
    NotInHouseholdError,
    InvalidAmountError,
    PayerNotInHouseholdError,
    SplitUserNotInHouseholdError,
    ExpenseNotFoundError,
    SplitNotFoundError,
    NotExpenseOwnerError,
)


logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _to_amount(value):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError()
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError()
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _household_id_of(user):
    return (
        User.objects
        .filter(id=user.id)
        .values_list('household_id', flat=True)
        .first()
    )


class ExpenseLedgerService:
    """
    Service for the household expense ledger.

    An expense is paid by one member; each split records what another
    member owes the payer for it. Splits start ``pending`` and become
    ``settled`` when paid back. Balances are derived from pending splits
    only, so nothing is stored per user.

    Methods:
        create_expense: Record an expense with equal or explicit splits.
        settle_split: Mark one split as settled.
        settle_with_user: Settle everything the caller owes one payer.
        get_balances: Summarize what the caller owes and is owed.
        list_expenses: Household expenses, newest first.
        delete_expense: Remove an expense (creator or payer only).
        update_expense: Edit details of an expense (creator or payer only).
    """

    @staticmethod
    def create_expense(
        created_by,
        description,
        total_amount,
        paid_by_id=None,
        date=None,
        category=ExpenseCategory.OTHER,
        splits=None  # List of {'owed_by_id', 'amount'}, or None for equal split
    ):
        """
        Create an expense in the creator's household and its splits.

        Without explicit splits, every current member except the payer owes
        ``total_amount / member_count`` rounded to cents. The payer counts
        in the divisor but gets no split row, so in a household of three a
        900.00 expense produces two 300.00 splits.

        Args:
            created_by (User): The user recording the expense.
            description (str): What was paid for.
            total_amount (Decimal): Positive total.
            paid_by_id (UUID, optional): Payer; defaults to the creator.
            date (date, optional): Expense date; defaults to today.
            category (str, optional): One of ExpenseCategory.
            splits (list[dict], optional): Explicit ``owed_by_id`` / ``amount``
                pairs, stored as given.

        Returns:
            Expense: The created expense with splits prefetched.

        Raises:
            NotInHouseholdError: Creator has no household.
            InvalidAmountError: Total or a split amount is not positive.
            PayerNotInHouseholdError: Payer is not a household member.
            SplitUserNotInHouseholdError: A split names a non-member.
        """
        with transaction.atomic():
            household_id = _household_id_of(created_by)
            if household_id is None:
                raise NotInHouseholdError('You must be in a household to create expenses.')

            total = _to_amount(total_amount)

            members = list(User.objects.in_household(household_id).order_by('created_at'))
            member_ids = {member.id for member in members}

            payer_id = paid_by_id or created_by.id
            if str(payer_id) not in {str(member_id) for member_id in member_ids}:
                raise PayerNotInHouseholdError()

            expense_fields = {
                'household_id': household_id,
                'paid_by_id': payer_id,
                'created_by_id': created_by.id,
                'description': description,
                'total_amount': total,
                'category': category or ExpenseCategory.OTHER,
            }
            if date is not None:
                expense_fields['date'] = date

            if splits:
                splits_data = ExpenseLedgerService._validate_explicit_splits(splits, member_ids)
            else:
                splits_data = ExpenseLedgerService._calculate_equal_splits(total, members, payer_id)

            expense = Expense.objects.create(**expense_fields)

            ExpenseSplit.objects.bulk_create([
                ExpenseSplit(
                    expense=expense,
                    owed_by_id=owed_by_id,
                    amount=amount,
                    status=SplitStatus.PENDING
                )
                for owed_by_id, amount in splits_data
            ])

            events.emit_household_event(
                household_id,
                events.EXPENSE_CREATED,
                affected_user_ids=[owed_by_id for owed_by_id, _ in splits_data],
                expense_id=str(expense.id),
                description=expense.description,
                total_amount=str(expense.total_amount),
                paid_by=str(payer_id),
            )

            logger.info(
                "Expense %s (%s) created in household %s with %d splits",
                expense.id, total, household_id, len(splits_data)
            )

        return (
            Expense.objects
            .select_related('paid_by', 'created_by')
            .prefetch_related('splits__owed_by')
            .get(id=expense.id)
        )

    @staticmethod
    def _calculate_equal_splits(total, members, payer_id):
        """
        Equal split among all members, payer excluded from the rows.

        Args:
            total (Decimal): Expense total.
            members (list[User]): Current household members, payer included.
            payer_id (UUID): Payer, who owes nothing.

        Returns:
            list[tuple]: (owed_by_id, amount) pairs.
        """
        if not members:
            return []

        share = (total / len(members)).quantize(CENT, rounding=ROUND_HALF_UP)
        return [
            (member.id, share)
            for member in members
            if str(member.id) != str(payer_id)
        ]

    @staticmethod
    def _validate_explicit_splits(splits, member_ids):
        member_keys = {str(member_id) for member_id in member_ids}
        splits_data = []
        for split in splits:
            owed_by_id = split['owed_by_id']
            if str(owed_by_id) not in member_keys:
                raise SplitUserNotInHouseholdError()
            splits_data.append((owed_by_id, _to_amount(split['amount'])))
        return splits_data

    @staticmethod
    def settle_split(split_id, user):
        """
        Mark a split as settled.

        Only members of the expense's household may settle its splits.
        Settling a split that is already settled succeeds without changes.

        Args:
            split_id (UUID): The split to settle.
            user (User): Who is settling.

        Returns:
            ExpenseSplit: The settled split.

        Raises:
            SplitNotFoundError: If no split has this id.
            NotInHouseholdError: If the caller is not in the expense's household.
        """
        with transaction.atomic():
            try:
                split = (
                    ExpenseSplit.objects
                    .select_for_update()
                    .select_related('expense')
                    .get(id=split_id)
                )
            except ExpenseSplit.DoesNotExist:
                raise SplitNotFoundError()

            household_id = _household_id_of(user)
            if household_id is None or household_id != split.expense.household_id:
                raise NotInHouseholdError('You can only settle splits in your own household.')

            if split.mark_settled():
                logger.info("Split %s settled by %s", split.id, user.id)

        return split

    @staticmethod
    def settle_with_user(current_user, other_user_id):
        """
        Settle every pending split the caller owes on expenses the other user paid.

        Splits the other user owes the caller are left untouched.

        Returns:
            int: Number of splits settled.
        """
        with transaction.atomic():
            splits = (
                ExpenseSplit.objects
                .pending()
                .select_for_update()
                .filter(owed_by_id=current_user.id, expense__paid_by_id=other_user_id)
            )

            settled = 0
            for split in splits:
                if split.mark_settled():
                    settled += 1

        logger.info(
            "User %s settled %d splits with %s",
            current_user.id, settled, other_user_id
        )
        return settled

    @staticmethod
    def get_balances(user):
        """
        Summarize the caller's outstanding debts and credits.

        Scans all pending splits. Splits where the ower is also the payer
        count in neither direction.

        Returns:
            dict: ``you_owe`` and ``you_are_owed`` totals, ``debts`` keyed
            by payer id and ``credits`` keyed by ower id.
        """
        splits = (
            ExpenseSplit.objects
            .pending()
            .filter(Q(owed_by_id=user.id) | Q(expense__paid_by_id=user.id))
            .values_list('owed_by_id', 'expense__paid_by_id', 'amount')
        )

        you_owe = Decimal('0.00')
        you_are_owed = Decimal('0.00')
        debts = defaultdict(lambda: Decimal('0.00'))
        credits = defaultdict(lambda: Decimal('0.00'))

        for owed_by_id, paid_by_id, amount in splits:
            if owed_by_id == paid_by_id:
                continue
            if owed_by_id == user.id:
                you_owe += amount
                debts[str(paid_by_id)] += amount
            elif paid_by_id == user.id:
                you_are_owed += amount
                credits[str(owed_by_id)] += amount

        return {
            'you_owe': you_owe,
            'you_are_owed': you_are_owed,
            'debts': dict(debts),
            'credits': dict(credits),
        }

    @staticmethod
    def list_expenses(user):
        """Expenses of the caller's household, newest first; empty when unaffiliated."""
        household_id = _household_id_of(user)
        if household_id is None:
            return Expense.objects.none()

        return (
            Expense.objects
            .filter(household_id=household_id)
            .select_related('paid_by', 'created_by')
            .prefetch_related('splits__owed_by')
            .order_by('-date', '-created_at')
        )

    @staticmethod
    def delete_expense(user, expense_id):
        """
        Delete an expense and its splits.

        Raises:
            ExpenseNotFoundError: If the expense is missing.
            NotExpenseOwnerError: If the caller neither created nor paid it.
        """
        with transaction.atomic():
            try:
                expense = Expense.objects.select_for_update().get(id=expense_id)
            except Expense.DoesNotExist:
                raise ExpenseNotFoundError()

            if user.id not in (expense.created_by_id, expense.paid_by_id):
                raise NotExpenseOwnerError()

            expense.delete()

        logger.info("Expense %s deleted by %s", expense_id, user.id)

    @staticmethod
    def update_expense(user, expense_id, description=None, total_amount=None,
                       date=None, category=None):
        """
        Edit an expense's details (creator or payer only).

        Only the fields passed are changed. Existing splits are left as they
        are, even when ``total_amount`` changes.

        Returns:
            Expense: The updated expense with splits prefetched.

        Raises:
            ExpenseNotFoundError: If the expense is missing.
            NotExpenseOwnerError: If the caller neither created nor paid it.
            InvalidAmountError: If ``total_amount`` is not positive.
        """
        with transaction.atomic():
            try:
                expense = Expense.objects.select_for_update().get(id=expense_id)
            except Expense.DoesNotExist:
                raise ExpenseNotFoundError()

            if user.id not in (expense.created_by_id, expense.paid_by_id):
                raise NotExpenseOwnerError()

            changed = []
            if description:
                expense.description = description
                changed.append('description')
            if total_amount is not None:
                expense.total_amount = _to_amount(total_amount)
                changed.append('total_amount')
            if date is not None:
                expense.date = date
                changed.append('date')
            if category:
                expense.category = category
                changed.append('category')

            if changed:
                expense.save(update_fields=changed + ['updated_at'])
                logger.info("Expense %s updated by %s (%s)", expense.id, user.id, ', '.join(changed))

        return (
            Expense.objects
            .select_related('paid_by', 'created_by')
            .prefetch_related('splits__owed_by')
            .get(id=expense.id)
        )
