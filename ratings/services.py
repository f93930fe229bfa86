import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.db.models import Avg, Count

from common.exceptions import BackendUnavailable, StoreNotFound, ValidationError
from stores.models import Store
from .models import MAX_SCORE, MIN_SCORE, Rating

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class AggregateSnapshot:
    store_id: int
    average_rating: Decimal
    total_ratings: int
    rating_id: int = None
    score: int = None
    created: bool = False

    def as_dict(self):
        return {
            "storeId": self.store_id,
            "ratingId": self.rating_id,
            "rating": self.score,
            "average_rating": float(self.average_rating),
            "total_ratings": self.total_ratings,
            "created": self.created,
        }


def validate_score(score):
    # bool 은 int 의 하위 타입이라 따로 거른다
    if isinstance(score, bool) or not isinstance(score, int) or not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(f"Rating must be between {MIN_SCORE} and {MAX_SCORE}")
    return score


def _recompute(store, using):
    # 같은 트랜잭션 안에서 방금 쓴 평점까지 포함해 다시 계산
    agg = Rating.objects.using(using).filter(store_id=store.pk).aggregate(
        avg=Avg("score"), total=Count("id"),
    )
    total = agg["total"] or 0
    average = Decimal(str(agg["avg"])) if total else Decimal("0")
    store.average_rating = average.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    store.total_ratings = total
    store.save(using=using, update_fields=["average_rating", "total_ratings", "updated_at"])


def _lock_store(store_id, using):
    # 행 잠금으로 같은 가게에 대한 동시 평점 쓰기를 직렬화
    store = Store.objects.using(using).select_for_update().filter(pk=store_id).first()
    if store is None:
        raise StoreNotFound()
    return store


def record_rating(account_id, store_id, score, review="", using=DEFAULT_DB_ALIAS):
    """
    (계정, 가게) 평점을 upsert 하고 같은 트랜잭션에서 가게 평균/개수를 다시 계산한다.
    - 처음이면 생성, 이미 있으면 점수/리뷰 덮어쓰기
    - 가게가 없으면 StoreNotFound
    - 점수 범위를 벗어나면 ValidationError
    """
    validate_score(score)
    review = (review or "")[:3000]

    try:
        with transaction.atomic(using=using):
            store = _lock_store(store_id, using)

            rating, created = Rating.objects.using(using).update_or_create(
                user_id=account_id,
                store_id=store.pk,
                defaults={"score": score, "review": review},
            )
            _recompute(store, using)
    except DatabaseError:
        # 잠금 대기 시간 초과 포함. 재시도 여부는 호출자가 판단
        logger.exception("Rating write for store %s failed", store_id)
        raise BackendUnavailable()

    logger.info(
        "Account %s %s rating %s for store %s (avg=%s, total=%s)",
        account_id, "created" if created else "updated", score,
        store.pk, store.average_rating, store.total_ratings,
    )
    return AggregateSnapshot(
        store_id=store.pk,
        average_rating=store.average_rating,
        total_ratings=store.total_ratings,
        rating_id=rating.pk,
        score=rating.score,
        created=created,
    )


def refresh_store_aggregate(store_id, using=DEFAULT_DB_ALIAS):
    """평점 쓰기 없이 집계만 다시 맞춘다 (복구용)."""
    try:
        with transaction.atomic(using=using):
            store = _lock_store(store_id, using)
            _recompute(store, using)
    except DatabaseError:
        logger.exception("Aggregate refresh for store %s failed", store_id)
        raise BackendUnavailable()
    return AggregateSnapshot(
        store_id=store.pk,
        average_rating=store.average_rating,
        total_ratings=store.total_ratings,
    )
