from django.urls import path
from .views import AuthView, RegisterView, UserInfoView

urlpatterns = [
    path('register/', RegisterView.as_view(), name='register'),
    path('login/', AuthView.as_view(), name='login'),
    path('me/', UserInfoView.as_view(), name='me'),
]
