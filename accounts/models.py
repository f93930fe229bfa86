from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager

from common.models import BaseModel


class Role(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    STORE_OWNER = "STORE_OWNER", "Store owner"
    NORMAL_USER = "NORMAL_USER", "Normal user"

    @classmethod
    def parse(cls, value):
        """대소문자 구분 없이 역할 문자열을 Role 로 변환. 알 수 없는 값이면 ValueError."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown role: {value!r}")
        key = value.strip().upper()
        # 이전 버전 토큰/데이터 호환
        if key == "SYSTEM_ADMIN":
            key = "ADMIN"
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email).lower()
        extra_fields.setdefault("role", Role.NORMAL_USER)
        extra_fields["role"] = Role.parse(extra_fields["role"])
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", Role.ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra_fields)


class User(BaseModel, AbstractUser):
    # AbstractUser의 username/first_name/last_name/date_joined 는 사용하지 않음
    username = None
    first_name = None
    last_name = None
    date_joined = None

    name = models.CharField(max_length=60)
    # 이메일은 전역 유일
    email = models.EmailField(unique=True)
    address = models.CharField(max_length=400)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.NORMAL_USER)

    objects = UserManager()

    # 이메일을 로그인 ID로 사용하도록 설정
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        db_table = "users"
        indexes = [
            models.Index(fields=["role"], name="users_role_idx"),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    @property
    def role_enum(self):
        return Role.parse(self.role)

    @property
    def is_admin(self):
        return self.role_enum == Role.ADMIN
