import re

from rest_framework import serializers

from .models import Role, User

# 대문자 1개 이상 + 특수문자 1개 이상
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Z])(?=.*[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?])")


def validate_password_policy(value):
    if not 8 <= len(value) <= 16:
        raise serializers.ValidationError("Password must be between 8 and 16 characters")
    if not PASSWORD_PATTERN.match(value):
        raise serializers.ValidationError(
            "Password must contain at least one uppercase letter and one special character"
        )
    return value


class RoleField(serializers.ChoiceField):
    """대소문자 무관하게 받아서 Role 값으로 저장."""

    def __init__(self, **kwargs):
        super().__init__(choices=Role.choices, **kwargs)

    def to_internal_value(self, data):
        try:
            return Role.parse(data).value
        except ValueError:
            self.fail("invalid_choice", input=data)


class AccountFieldsMixin:
    # 이름/주소/이메일 공통 검증

    def validate_name(self, value):
        value = value.strip()
        if not 20 <= len(value) <= 60:
            raise serializers.ValidationError("Name must be between 20 and 60 characters")
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
        qs = User.objects.filter(email=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("User already exists with this email")
        return value


# 회원가입용 시리얼라이저 (NORMAL_USER 로만 생성)
class RegisterSerializer(AccountFieldsMixin, serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password_policy])

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'password', 'address', 'role', 'created_at']
        read_only_fields = ['id', 'role', 'created_at']
        # 중복 검사는 validate_email 에서 소문자로 처리
        extra_kwargs = {'email': {'validators': []}}

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, role=Role.NORMAL_USER, **validated_data)


# 관리자용 계정 생성 (역할 지정 가능)
class AdminUserCreateSerializer(RegisterSerializer):
    role = RoleField(required=False, default=Role.NORMAL_USER)

    class Meta(RegisterSerializer.Meta):
        read_only_fields = ['id', 'created_at']

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


# 관리자용 계정 수정. 역할 변경은 이 경로로만 가능
class AdminUserUpdateSerializer(AccountFieldsMixin, serializers.ModelSerializer):
    role = RoleField(required=False)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'address', 'role', 'created_at']
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {
            'name': {'required': False},
            'email': {'required': False, 'validators': []},
            'address': {'required': False},
        }

    def validate_role(self, value):
        # 가게를 가진 점주는 다른 역할로 바꿀 수 없음
        instance = self.instance
        if instance is not None and value != Role.STORE_OWNER and hasattr(instance, "store"):
            raise serializers.ValidationError("Store owner still owns a store")
        return value


class AuthSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        email = data.get("email").strip().lower()
        password = data.get("password")

        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            raise serializers.ValidationError("Invalid email or password")

        if not user.is_active or not user.check_password(password):
            raise serializers.ValidationError("Invalid email or password")

        data["user"] = user
        return data


class UserSerializer(serializers.ModelSerializer):
    store_id = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "name", "email", "address", "role", "created_at", "store_id"]

    def get_store_id(self, obj):
        store = getattr(obj, "store", None)
        return store.pk if store else None
