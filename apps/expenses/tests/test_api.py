import pytest
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.expenses.models import Expense, ExpenseSplit, SplitStatus


@pytest.mark.django_db
class TestExpenseListCreateAPI:
    """Tests for GET/POST /api/expenses/"""

    def test_create_equal_split(self, client_for, household, user_a, user_b, user_c):
        url = reverse('expenses:expense-list')
        response = client_for(user_a).post(
            url,
            {'description': 'Rent', 'total_amount': '900.00'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['paid_by']['id'] == str(user_a.id)
        assert response.data['category'] == 'other'
        owed = {split['owed_by']['id']: split['amount'] for split in response.data['splits']}
        assert owed == {str(user_b.id): '300.00', str(user_c.id): '300.00'}

    def test_create_explicit_splits(self, client_for, household, user_a, user_b):
        url = reverse('expenses:expense-list')
        response = client_for(user_a).post(
            url,
            {
                'description': 'Dinner',
                'total_amount': '42.00',
                'category': 'groceries',
                'splits': [{'owed_by_id': str(user_b.id), 'amount': '12.00'}],
            },
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert len(response.data['splits']) == 1
        assert response.data['splits'][0]['amount'] == '12.00'

    def test_create_invalid_amount(self, client_for, household, user_a):
        url = reverse('expenses:expense-list')
        response = client_for(user_a).post(
            url,
            {'description': 'Rent', 'total_amount': '0.00'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_amount'

    def test_create_payer_outside_household(self, client_for, household, user_a, outsider):
        url = reverse('expenses:expense-list')
        response = client_for(user_a).post(
            url,
            {'description': 'Rent', 'total_amount': '10.00', 'paid_by_id': str(outsider.id)},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'payer_not_in_household'

    def test_create_without_household(self, client_for, outsider):
        url = reverse('expenses:expense-list')
        response = client_for(outsider).post(
            url,
            {'description': 'Rent', 'total_amount': '10.00'},
            format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_in_household'

    def test_list(self, client_for, make_expense, user_a, user_b, outsider):
        make_expense(user_a, [(user_b, Decimal('5.00'))])
        url = reverse('expenses:expense-list')

        response = client_for(user_b).get(url)
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

        response = client_for(outsider).get(url)
        assert response.data == []

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('expenses:expense-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestExpenseDeleteAPI:
    """Tests for DELETE /api/expenses/{id}/"""

    def test_delete_by_payer(self, client_for, make_expense, user_a, user_b):
        expense = make_expense(user_a, [(user_b, Decimal('5.00'))])
        url = reverse('expenses:expense-detail', args=[expense.id])

        response = client_for(user_a).delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Expense.objects.filter(id=expense.id).exists()

    def test_delete_by_other_member(self, client_for, make_expense, user_a, user_b, user_c):
        expense = make_expense(user_a, [(user_b, Decimal('5.00'))])
        url = reverse('expenses:expense-detail', args=[expense.id])

        response = client_for(user_c).delete(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_expense_owner'

    def test_delete_missing(self, client_for, household, user_a):
        url = reverse('expenses:expense-detail', args=[uuid4()])

        response = client_for(user_a).delete(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'expense_not_found'


@pytest.mark.django_db
class TestExpenseUpdateAPI:
    """Tests for PUT /api/expenses/{id}/"""

    def test_update_by_creator(self, client_for, make_expense, user_a, user_b):
        expense = make_expense(user_a, [(user_b, Decimal('5.00'))], description='Milk')
        url = reverse('expenses:expense-detail', args=[expense.id])

        response = client_for(user_a).put(
            url,
            {'description': 'Milk and eggs', 'total_amount': '12.50', 'category': 'groceries'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['description'] == 'Milk and eggs'
        assert response.data['total_amount'] == '12.50'
        assert response.data['category'] == 'groceries'
        assert [split['amount'] for split in response.data['splits']] == ['5.00']

    def test_update_by_other_member(self, client_for, make_expense, user_a, user_b, user_c):
        expense = make_expense(user_a, [(user_b, Decimal('5.00'))])
        url = reverse('expenses:expense-detail', args=[expense.id])

        response = client_for(user_c).put(url, {'description': 'Taken over'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_expense_owner'

    def test_update_invalid_amount(self, client_for, make_expense, user_a, user_b):
        expense = make_expense(user_a, [(user_b, Decimal('5.00'))])
        url = reverse('expenses:expense-detail', args=[expense.id])

        response = client_for(user_a).put(url, {'total_amount': '-3.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_amount'


@pytest.mark.django_db
class TestSettlementAPI:
    """Tests for split settlement and settle-up endpoints."""

    def test_settle_split(self, client_for, make_expense, user_a, user_b):
        split = make_expense(user_a, [(user_b, Decimal('5.00'))]).splits.get()
        url = reverse('expenses:split-settle', args=[split.id])

        response = client_for(user_b).put(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == SplitStatus.SETTLED

    def test_settle_missing_split(self, client_for, household, user_b):
        url = reverse('expenses:split-settle', args=[uuid4()])

        response = client_for(user_b).put(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'split_not_found'

    def test_settle_split_by_outsider(self, client_for, make_expense, user_a, user_b, outsider):
        split = make_expense(user_a, [(user_b, Decimal('300.00'))]).splits.get()
        url = reverse('expenses:split-settle', args=[split.id])

        response = client_for(outsider).put(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['code'] == 'not_in_household'
        split.refresh_from_db()
        assert split.status == SplitStatus.PENDING

    def test_settle_with_user_then_balances(self, client_for, make_expense, user_a, user_b):
        """A owes B 300 and 200; after settling with B nothing is owed."""
        make_expense(user_b, [(user_a, Decimal('300.00'))])
        make_expense(user_b, [(user_a, Decimal('200.00'))])
        client = client_for(user_a)

        response = client.get(reverse('expenses:balances'))
        assert response.data['you_owe'] == '500.00'
        assert response.data['debts'] == {str(user_b.id): '500.00'}

        response = client.put(reverse('expenses:settle-with', args=[user_b.id]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['settled_count'] == 2

        response = client.get(reverse('expenses:balances'))
        assert response.data['you_owe'] == '0.00'
        assert response.data['debts'] == {}
        assert ExpenseSplit.objects.pending().count() == 0

    def test_balances_for_payer(self, client_for, make_expense, user_a, user_b, user_c):
        make_expense(user_a, [(user_b, Decimal('300.00')), (user_c, Decimal('300.00'))])

        response = client_for(user_a).get(reverse('expenses:balances'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['you_are_owed'] == '600.00'
        assert response.data['credits'] == {
            str(user_b.id): '300.00',
            str(user_c.id): '300.00',
        }
