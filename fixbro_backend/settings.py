from pathlib import Path
import os

import dj_database_url

BASE_DIR = Path(__file__).resolve().parent.parent
STATIC_ROOT = BASE_DIR / 'staticfiles'


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-only-3v#k1p!r8u$q2m_fixbro-local-key')
DEBUG = env_bool('DJANGO_DEBUG', True)
ALLOWED_HOSTS = [h.strip() for h in os.environ.get('DJANGO_ALLOWED_HOSTS', '*').split(',') if h.strip()]


# ---------------------------------------------------------
# ✅ Application definition
# ---------------------------------------------------------

INSTALLED_APPS = [
    # Admin theme (should be first)
    'jazzmin',

    # Django's built-in apps
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third-party apps
    'import_export',

    # Marketplace apps
    'accounts',
    'catalog',
    'cart',
    'scheduling',
    'promotions',
    'bookings',
    'providers',
    'admin_panel',

    # Core goes last so its auto admin registration sees every other model
    'core.apps.CoreConfig',
]


MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'fixbro_backend.urls'

AUTHENTICATION_BACKENDS = [
    'accounts.backends.CaseInsensitiveAuthBackend',
]

AUTH_USER_MODEL = 'accounts.CustomUser'


# ---------------------------------------------------------
# ✅ Templates
# ---------------------------------------------------------
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [os.path.join(BASE_DIR, 'templates')],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
                'catalog.context_processors.navbar_categories',
            ],
        },
    },
]

WSGI_APPLICATION = 'fixbro_backend.wsgi.application'


# ---------------------------------------------------------
# ✅ Database
# ---------------------------------------------------------
DATABASES = {
    'default': dj_database_url.config(
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600,
        ssl_require=env_bool('DATABASE_SSL_REQUIRE', False),
    )
}


# Media files
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

# ---------------------------------------------------------
# ✅ Password Validation
# ---------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

# ---------------------------------------------------------
# ✅ Internationalization
# ---------------------------------------------------------
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'Asia/Kolkata'
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------
# ✅ Static and Media
# ---------------------------------------------------------
STATIC_URL = '/static/'

# ---------------------------------------------------------
# ✅ Login Redirect
# ---------------------------------------------------------
LOGIN_URL = '/auth/login/'

# ---------------------------------------------------------
# ✅ Default PK field
# ---------------------------------------------------------
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

SESSION_COOKIE_SECURE = env_bool('DJANGO_SECURE_COOKIES', not DEBUG)
CSRF_COOKIE_SECURE = SESSION_COOKIE_SECURE

# ---------------------------------------------------------
# ✅ Marketplace
# ---------------------------------------------------------
# Admin account that receives "new booking" notifications
ADMIN_EMAIL = os.environ.get('FIXBRO_ADMIN_EMAIL', 'admin@fixbro.in')
BOOKING_ID_PREFIX = os.environ.get('FIXBRO_BOOKING_PREFIX', 'FIXBRO')
CURRENCY_SYMBOL = '₹'

JAZZMIN_SETTINGS = {
    'site_title': 'FixBro Admin',
    'site_header': 'FixBro',
    'site_brand': 'FixBro',
    'welcome_sign': 'Welcome to the FixBro back-office',
    'search_model': ['bookings.Booking', 'accounts.CustomUser'],
    'order_with_respect_to': ['bookings', 'catalog', 'scheduling', 'promotions', 'providers', 'core', 'accounts'],
}

# ---------------------------------------------------------
# ✅ Logging
# ---------------------------------------------------------
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
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
        'level': os.environ.get('DJANGO_LOG_LEVEL', 'INFO'),
    },
    'loggers': {
        'django.db.backends': {
            'level': 'WARNING',
        },
    },
}
