from pathlib import Path

import os, json
from django.core.exceptions import ImproperlyConfigured

from datetime import timedelta #login

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# secret_key setting
secret_file = os.path.join(BASE_DIR, 'secrets.json')

secrets = {}
if os.path.exists(secret_file):
    with open(secret_file) as f:
        secrets = json.loads(f.read())

_MISSING = object()

def get_secret(setting, default=_MISSING, secrets=secrets):
    # secrets.json first, then the environment, then the default
    try:
        return secrets[setting]
    except KeyError:
        pass
    value = os.getenv(setting)
    if value is not None:
        return value
    if default is not _MISSING:
        return default
    error_msg = "Set the {} environment variable".format(setting)
    raise ImproperlyConfigured(error_msg)


ENV = os.getenv('ENV', 'local')  # local | test | production

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = ENV != 'production'

SECRET_KEY = get_secret("SECRET_KEY", None if ENV == 'production' else "local-insecure-secret-key-for-development-only")
if SECRET_KEY is None:
    raise ImproperlyConfigured("Set the SECRET_KEY environment variable")

ALLOWED_HOSTS = [h for h in get_secret("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",") if h]


# Application definition

DJANGO_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
]

PROJECT_APPS = [
    'accounts',
    'stores',
    'ratings',
    'adminpanel',
]

THIRD_PARTY_APPS = [
    "corsheaders",
    'rest_framework',
    'rest_framework_simplejwt',
]

INSTALLED_APPS = DJANGO_APPS + PROJECT_APPS + THIRD_PARTY_APPS

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

ROOT_URLCONF = 'config.urls'

WSGI_APPLICATION = 'config.wsgi.application'

# Database
# https://docs.djangoproject.com/en/5.2/ref/settings/#databases

if ENV == 'production':
    import pymysql
    pymysql.install_as_MySQLdb()

    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.mysql',
            'NAME': get_secret("DB_NAME"),
            'USER': get_secret("DB_USER"),
            'PASSWORD': get_secret("DB_PW"),
            'HOST': get_secret("DB_HOST"),
            'PORT': get_secret("DB_PORT", "3306"),
            # lock waits past this surface as BackendUnavailable
            'OPTIONS': {
                'connect_timeout': int(get_secret("DB_CONNECT_TIMEOUT", "10")),
                'init_command': "SET innodb_lock_wait_timeout = {}".format(
                    int(get_secret("DB_LOCK_TIMEOUT", "10"))
                ),
            },
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
            # 쓰기 트랜잭션은 시작 시점에 잠금을 잡고, 잠금 대기는 timeout 초까지
            'OPTIONS': {
                'transaction_mode': 'IMMEDIATE',
                'timeout': int(get_secret("DB_LOCK_TIMEOUT", "20")),
            },
            # 여러 스레드가 같은 테스트 DB 를 보도록 파일로 생성
            'TEST': {
                'NAME': BASE_DIR / 'test_db.sqlite3',
            },
        }
    }

# Internationalization
# https://docs.djangoproject.com/en/5.2/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

# Default primary key field type
# https://docs.djangoproject.com/en/5.2/ref/settings/#default-auto-field

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

CORS_ALLOW_CREDENTIALS = True

CORS_ALLOWED_ORIGINS = [o for o in get_secret(
    "CORS_ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
).split(",") if o]

### LOGIN ###

AUTH_USER_MODEL = 'accounts.User' #accounts

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'accounts.authentication.BearerTokenAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_RENDERER_CLASSES': (
        'rest_framework.renderers.JSONRenderer',
    ),
    'EXCEPTION_HANDLER': 'common.handlers.api_exception_handler',
    'COERCE_DECIMAL_TO_STRING': False,
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(hours=24),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=7),
    'ROTATE_REFRESH_TOKENS': False,
    'BLACKLIST_AFTER_ROTATION': False,
    'ALGORITHM': 'HS256',
    'SIGNING_KEY': get_secret("JWT_SECRET", SECRET_KEY),
    'USER_ID_FIELD': 'id',
    'USER_ID_CLAIM': 'user_id',
}

### LOGGING ###

LOG_LEVEL = get_secret("LOG_LEVEL", "INFO")

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django.db.backends': {
            'level': 'WARNING',
        },
    },
}
