from decimal import Decimal

from django.conf import settings
from django.db import models

from common.models import BaseModel

# 가게 모델
class Store(BaseModel):
    name = models.CharField(max_length=60)                 # 가게명
    email = models.EmailField(unique=True)
    address = models.CharField(max_length=400)

    # 점주 한 명은 가게 하나만 소유. 점주 없는 가게도 허용
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='store',
    )

    # 파생 값: ratings 테이블과 항상 일치해야 함 (ratings.services 에서만 갱신)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal("0.00"))
    total_ratings = models.PositiveIntegerField(default=0)

    class Meta: # DB 테이블명 명시
        db_table = "stores"
        indexes = [
            models.Index(fields=["average_rating"], name="stores_avg_rating_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.email})"
