from django.db import IntegrityError, transaction
from rest_framework import serializers

from accounts.models import Role, User
from .models import Store


class StoreSerializer(serializers.ModelSerializer):
    owner_name = serializers.SerializerMethodField()

    class Meta:
        model = Store
        fields = [
            "id", "name", "email", "address", "owner_id", "owner_name",
            "average_rating", "total_ratings", "created_at",
        ]

    def get_owner_name(self, obj):
        return obj.owner.name if obj.owner_id else None


# 관리자용 가게 생성
class StoreCreateSerializer(serializers.ModelSerializer):
    ownerId = serializers.IntegerField(required=False, allow_null=True, min_value=1, write_only=True)

    class Meta:
        model = Store
        fields = ["name", "email", "address", "ownerId"]
        extra_kwargs = {"email": {"validators": []}}

    def validate_name(self, value):
        value = value.strip()
        if not 20 <= len(value) <= 60:
            raise serializers.ValidationError("Store name must be between 20 and 60 characters")
        return value

    def validate_address(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Address is required")
        if len(value) > 400:
            raise serializers.ValidationError("Address must not exceed 400 characters")
        return value

    def validate_email(self, value):
        value = value.strip().lower()
        if Store.objects.filter(email=value).exists():
            raise serializers.ValidationError("Store already exists with this email")
        return value

    @transaction.atomic
    def create(self, validated_data):
        owner_id = validated_data.pop("ownerId", None)
        owner = None

        if owner_id:
            # 점주 행 잠금: 같은 점주에게 가게 두 개가 동시에 배정되지 않도록
            owner = User.objects.select_for_update().filter(pk=owner_id).first()
            if owner is None:
                raise serializers.ValidationError({"ownerId": ["Owner not found"]})
            if owner.role_enum != Role.STORE_OWNER:
                raise serializers.ValidationError({"ownerId": ["User must be a store owner"]})
            if Store.objects.filter(owner_id=owner.pk).exists():
                raise serializers.ValidationError({"ownerId": ["Store owner already has a store"]})

        try:
            with transaction.atomic():
                return Store.objects.create(owner=owner, **validated_data)
        except IntegrityError:
            raise serializers.ValidationError("Store email or owner is already taken")
