"""
Domain exceptions for expenses app.

This module defines the exception hierarchy for ledger errors. Every error
is an APIException so it carries its HTTP status and a machine-checkable
code; views render them as ``{"error": ..., "code": ...}``.
"""
from rest_framework.exceptions import APIException


class ExpensesServiceError(APIException):
    """Base exception for expense ledger errors."""
    status_code = 400
    default_detail = 'Expense operation failed.'
    default_code = 'expenses_error'

    @property
    def code(self):
        return self.default_code


class NotInHouseholdError(ExpensesServiceError):
    """User has no household to record expenses in."""
    status_code = 403
    default_detail = 'You are not in a household.'
    default_code = 'not_in_household'


class InvalidAmountError(ExpensesServiceError):
    """Expense total or split amount is not positive."""
    status_code = 400
    default_detail = 'Amount must be greater than zero.'
    default_code = 'invalid_amount'


class PayerNotInHouseholdError(ExpensesServiceError):
    """Payer is not a member of the household."""
    status_code = 400
    default_detail = 'Payer is not a member of your household.'
    default_code = 'payer_not_in_household'


class SplitUserNotInHouseholdError(ExpensesServiceError):
    """A split is assigned to someone outside the household."""
    status_code = 400
    default_detail = 'Split user is not a member of your household.'
    default_code = 'split_user_not_in_household'


class ExpenseNotFoundError(ExpensesServiceError):
    """Expense not found."""
    status_code = 404
    default_detail = 'Expense not found.'
    default_code = 'expense_not_found'


class SplitNotFoundError(ExpensesServiceError):
    """Expense split not found."""
    status_code = 404
    default_detail = 'Split not found.'
    default_code = 'split_not_found'


class NotExpenseOwnerError(ExpensesServiceError):
    """Only the creator or payer may change an expense."""
    status_code = 403
    default_detail = 'Only the creator or payer can delete this expense.'
    default_code = 'not_expense_owner'
