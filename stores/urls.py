from django.urls import path
from .views import StoreRatingsView

urlpatterns = [
    path('<int:store_id>/ratings/', StoreRatingsView.as_view(), name='store-ratings'),
]
