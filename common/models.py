from django.db import models

# 공통 추상 클래스
class BaseModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)  # 객체 최초 생성 시간
    updated_at = models.DateTimeField(auto_now=True)      # 객체 저장/수정 시간

    class Meta:
        abstract = True  # DB에 BaseModel 테이블이 직접 만들어지지 않음
