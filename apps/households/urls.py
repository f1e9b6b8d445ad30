from django.urls import path
from . import views

app_name = 'households'

urlpatterns = [
    # POST   /api/households/                                - Create household
    # GET    /api/households/current/                        - Current household
    # POST   /api/households/join/                           - Join with invite code
    # POST   /api/households/leave/                          - Leave household
    # POST   /api/households/transfer-admin/                 - Transfer admin role (admin)
    # POST   /api/households/removal-request/                - Request removal (admin)
    # POST   /api/households/removal-request/{id}/vote/      - Vote on removal
    # GET    /api/households/removal-requests/               - Pending removal requests
    # POST   /api/households/regenerate-code/                - Regenerate invite code (admin)
    path('', views.household_create, name='household-create'),
    path('current/', views.current_household, name='current'),
    path('join/', views.household_join, name='join'),
    path('leave/', views.household_leave, name='leave'),
    path('transfer-admin/', views.household_transfer_admin, name='transfer-admin'),
    path('removal-request/', views.removal_request_create, name='removal-request-create'),
    path(
        'removal-request/<uuid:removal_request_id>/vote/',
        views.removal_request_vote,
        name='removal-request-vote'
    ),
    path('removal-requests/', views.removal_request_list, name='removal-request-list'),
    path('regenerate-code/', views.household_regenerate_code, name='regenerate-code'),
]
