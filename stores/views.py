from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsStoreOwnerOfStore
from ratings.models import Rating
from ratings.serializers import RatingSerializer
from .models import Store
from .serializers import StoreSerializer


class StoreRatingsView(APIView):
    """점주(본인 가게) 또는 관리자: 가게 집계와 평점 목록."""
    permission_classes = [IsStoreOwnerOfStore]

    def get(self, request, store_id):
        store = Store.objects.select_related("owner").get(pk=store_id)
        ratings = (
            Rating.objects.filter(store_id=store_id)
            .select_related("user")
            .order_by("-updated_at", "-id")
        )
        return Response(
            {
                "store": StoreSerializer(store).data,
                "ratings": RatingSerializer(ratings, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
