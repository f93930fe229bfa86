from django.urls import path
from .views import RatingDetailView, RatingSubmitView

urlpatterns = [
    path('', RatingSubmitView.as_view(), name='rating-submit'),
    path('<int:rating_id>/', RatingDetailView.as_view(), name='rating-detail'),
]
