from django.core.management.base import BaseCommand

from common.exceptions import BackendUnavailable
from ratings.services import refresh_store_aggregate
from stores.models import Store


class Command(BaseCommand):
    help = '평점 테이블 기준으로 가게별 평균/개수 집계를 다시 계산합니다.'

    def add_arguments(self, parser):
        parser.add_argument('--store', type=int, action='append', dest='store_ids',
                            help='특정 가게 id 만 다시 계산 (여러 번 지정 가능)')

    def handle(self, *args, **options):
        store_ids = options.get('store_ids')
        if not store_ids:
            store_ids = list(Store.objects.order_by('id').values_list('id', flat=True))

        fixed = 0
        for store_id in store_ids:
            before = Store.objects.filter(pk=store_id).values_list('average_rating', 'total_ratings').first()
            if before is None:
                self.stdout.write(self.style.ERROR(f"가게 {store_id}: 존재하지 않습니다. 건너뜁니다."))
                continue

            try:
                snapshot = refresh_store_aggregate(store_id)
            except BackendUnavailable as e:
                self.stdout.write(self.style.ERROR(f"가게 {store_id}: 오류가 발생했습니다 - {e}"))
                continue

            if before != (snapshot.average_rating, snapshot.total_ratings):
                fixed += 1
                self.stdout.write(
                    f"가게 {store_id}: {before[0]}/{before[1]} -> "
                    f"{snapshot.average_rating}/{snapshot.total_ratings}"
                )

        self.stdout.write(self.style.SUCCESS(f'집계 재계산 완료. {len(store_ids)}개 중 {fixed}개 수정.'))
