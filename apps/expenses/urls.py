from django.urls import path
from . import views

app_name = 'expenses'

urlpatterns = [
    # GET    /api/expenses/                          - List household expenses
    # POST   /api/expenses/                          - Create expense (with split)
    # PUT    /api/expenses/{id}/                     - Update expense details (creator/payer)
    # DELETE /api/expenses/{id}/                     - Delete expense (creator/payer)
    # PUT    /api/expenses/splits/{id}/settle/       - Settle one split
    # PUT    /api/expenses/settle-with/{user_id}/    - Settle everything owed to a user
    # GET    /api/expenses/balances/                 - Caller's balances
    path('', views.expense_list_create, name='expense-list'),
    path('balances/', views.balances, name='balances'),
    path('splits/<uuid:split_id>/settle/', views.split_settle, name='split-settle'),
    path('settle-with/<uuid:user_id>/', views.settle_with_user, name='settle-with'),
    path('<uuid:expense_id>/', views.expense_detail, name='expense-detail'),
]
