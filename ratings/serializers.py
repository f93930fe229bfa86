from rest_framework import serializers

from .models import MAX_SCORE, MIN_SCORE, Rating


class RatingWriteSerializer(serializers.Serializer):
    rating = serializers.IntegerField(
        min_value=MIN_SCORE,
        max_value=MAX_SCORE,
        error_messages={
            "min_value": "Rating must be between 1 and 5",
            "max_value": "Rating must be between 1 and 5",
        },
    )
    review = serializers.CharField(required=False, allow_blank=True, default="", max_length=3000)


class RatingSubmitSerializer(RatingWriteSerializer):
    storeId = serializers.IntegerField(min_value=1)


# 평점 읽기용
class RatingSerializer(serializers.ModelSerializer):
    rating = serializers.IntegerField(source="score", read_only=True)
    author = serializers.SerializerMethodField()

    class Meta:
        model = Rating
        fields = ["id", "store", "rating", "review", "created_at", "updated_at", "author"]

    def get_author(self, obj):
        u = getattr(obj, "user", None)
        if not u:
            return None
        return {
            "id": u.pk,
            "name": u.name,
            "email": u.email,
        }
