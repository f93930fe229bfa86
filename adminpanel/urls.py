from django.urls import path
from .views import *

urlpatterns = [
    path('dashboard/', AdminDashboardView.as_view(), name='admin-dashboard'),
    path('users/', AdminUserListView.as_view(), name='admin-users'),
    path('users/<int:user_id>/', AdminUserDetailView.as_view(), name='admin-user-detail'),
    path('stores/', AdminStoreListView.as_view(), name='admin-stores'),
    path('store-owners/', StoreOwnerOptionsView.as_view(), name='admin-store-owners'),
]
