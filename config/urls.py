from django.urls import path, include

urlpatterns = [
    path('auth/', include('accounts.urls')),
    path('admin/', include('adminpanel.urls')),
    path('stores/', include('stores.urls')),
    path('ratings/', include('ratings.urls')),
]
