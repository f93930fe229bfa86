from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from common.models import BaseModel
from stores.models import Store

MIN_SCORE = 1
MAX_SCORE = 5


class Rating(BaseModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='ratings')
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name='ratings')
    score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_SCORE), MaxValueValidator(MAX_SCORE)]
    )
    review = models.TextField(blank=True, default="", max_length=3000)

    class Meta:
        db_table = "ratings"
        constraints = [
            # 사용자당 가게별 평점은 하나 (재제출 시 덮어쓰기)
            models.UniqueConstraint(fields=["user", "store"], name="unique_user_store_rating"),
        ]
        indexes = [
            models.Index(fields=["store"], name="ratings_store_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.store_id}: {self.score}"
