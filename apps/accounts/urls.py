from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # POST /api/auth/register/  - Create account, returns JWT pair
    # POST /api/auth/login/     - Email/password login, returns JWT pair
    # GET  /api/auth/user/      - Caller's profile with household and role
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),
    path('user/', views.get_current_user, name='current-user'),
]
