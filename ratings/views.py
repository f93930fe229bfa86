from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsNormalUser, IsRatingAuthorOrAdmin
from .models import Rating
from .serializers import RatingSubmitSerializer, RatingWriteSerializer
from .services import record_rating


class RatingSubmitView(APIView):
    """일반 사용자 평점 제출. 같은 가게에 다시 제출하면 덮어쓴다."""
    permission_classes = [IsNormalUser]

    def post(self, request):
        serializer = RatingSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        snapshot = record_rating(
            account_id=request.user.pk,
            store_id=data["storeId"],
            score=data["rating"],
            review=data["review"],
        )
        return Response(
            {
                "message": "Rating submitted" if snapshot.created else "Rating updated",
                **snapshot.as_dict(),
            },
            status=status.HTTP_201_CREATED if snapshot.created else status.HTTP_200_OK,
        )


class RatingDetailView(APIView):
    """작성자 본인 또는 관리자만 수정."""
    permission_classes = [IsRatingAuthorOrAdmin]

    def put(self, request, rating_id):
        serializer = RatingWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        rating = Rating.objects.only("user", "store").get(pk=rating_id)
        snapshot = record_rating(
            account_id=rating.user_id,
            store_id=rating.store_id,
            score=data["rating"],
            review=data["review"],
        )
        return Response(
            {"message": "Rating updated", **snapshot.as_dict()},
            status=status.HTTP_200_OK,
        )
