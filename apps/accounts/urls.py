from django.urls import path

from .views import auth

app_name = 'accounts'

urlpatterns = [
    path('register', auth.register, name='register'),
    path('login', auth.login, name='login'),
    path('me', auth.me, name='me'),
]
