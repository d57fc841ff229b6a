"""
Configurações para o projeto Seoul Muse.
"""

import os
from decimal import Decimal
from pathlib import Path

from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# ====================================================================
# CONFIGURAÇÕES BÁSICAS
# ====================================================================

# A SECRET_KEY deve ser lida de uma variável de ambiente por segurança.
SECRET_KEY = config('SECRET_KEY', default='django-insecure-default-key-for-development')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1,testserver', cast=Csv())


# ====================================================================
# APLICAÇÕES INSTALADAS
# ====================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Aplicações de Terceiros
    'rest_framework',
    'drf_spectacular',
    'rest_framework_simplejwt',

    # Nossas Aplicações (Nessa ordem para referências de Models)
    'seoulmuse.core.apps.CoreConfig', # Entidades e Lógica Pura
    'seoulmuse.catalog.apps.CatalogConfig', # Catálogo de Produtos
    'seoulmuse.vendas.apps.VendasConfig', # Pedidos, Cupons e Clientes
    'seoulmuse.carrinho.apps.CarrinhoConfig', # Carrinho de Compras
    'seoulmuse.suporte.apps.SuporteConfig', # Auditoria e Chamados
    'seoulmuse.infrastructure.apps.InfrastructureConfig', # Repositórios e Comandos
    'seoulmuse.presentation.apps.PresentationConfig', # API REST
]


# ====================================================================
# MIDDLEWARE E TEMPLATES
# ====================================================================

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'seoulmuse.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'seoulmuse.wsgi.application'


# ====================================================================
# CONFIGURAÇÃO DO BANCO DE DADOS
# SQLite por padrão; PostgreSQL com DB_ENGINE=django.db.backends.postgresql
# ====================================================================

DATABASES = {
    'default': {
        'ENGINE': config('DB_ENGINE', default='django.db.backends.sqlite3'),
        'NAME': config('DB_NAME', default=str(BASE_DIR / 'db.sqlite3')),
        'USER': config('DB_USER', default=''),
        'PASSWORD': config('DB_PASSWORD', default=''),
        'HOST': config('DB_HOST', default=''),
        'PORT': config('DB_PORT', default=''),
    }
}

CACHES = {
    'default': {
        'BACKEND': config('CACHE_BACKEND', default='django.core.cache.backends.locmem.LocMemCache'),
        'LOCATION': config('CACHE_LOCATION', default='seoul-muse'),
    }
}


# ====================================================================
# AUTENTICAÇÃO E VALIDAÇÃO DE SENHA
# ====================================================================

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]


# ====================================================================
# INTERNACIONALIZAÇÃO
# ====================================================================

LANGUAGE_CODE = 'pt-br'

TIME_ZONE = 'Asia/Seoul'

USE_I18N = True

USE_TZ = True


# ====================================================================
# ARQUIVOS ESTÁTICOS
# ====================================================================

STATIC_URL = '/static/'
STATIC_ROOT = os.path.join(BASE_DIR, 'staticfiles')


# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ====================================================================
# CONFIGURAÇÕES DO DJANGO REST FRAMEWORK (DRF) E DOCS (SPECTACULAR)
# ====================================================================

SPECTACULAR_SETTINGS = {
    'TITLE': 'API da Seoul Muse',
    'DESCRIPTION': 'Catálogo, pedidos, cupons e suporte da loja Seoul Muse.',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}

REST_FRAMEWORK = {
    # JWT para o painel administrativo, SessionAuth para o Admin do Django.
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
}


# ====================================================================
# REGRAS DA LOJA
# ====================================================================

# 'orm' grava no banco relacional; 'cache' grava as coleções serializadas no cache
ARMAZENAMENTO_BACKEND = config('ARMAZENAMENTO_BACKEND', default='orm')

TAXA_IMPOSTO = config('TAXA_IMPOSTO', default='0.10', cast=Decimal)

METODOS_ENVIO = {
    'standard': Decimal('10.00'),
    'express': Decimal('25.00'),
    'pickup': Decimal('0.00'),
}

# Com False, qualquer status de pedido pode substituir qualquer outro
TRANSICOES_ESTRITAS = config('TRANSICOES_ESTRITAS', default=True, cast=bool)

LIMITE_AUDITORIA_LOCAL = config('LIMITE_AUDITORIA_LOCAL', default=500, cast=int)


# ====================================================================
# CONFIGURAÇÕES DE SERVIÇOS EXTERNOS (IA e Logging)
# ====================================================================

GEMINI_API_KEY = config('GEMINI_API_KEY', default='')
GEMINI_MODELO = config('GEMINI_MODELO', default='gemini-1.5-flash')
GEMINI_TIMEOUT = config('GEMINI_TIMEOUT', default=15, cast=float)
IA_CACHE_SEGUNDOS = config('IA_CACHE_SEGUNDOS', default=60 * 60 * 24, cast=int)
IA_COOLDOWN_SEGUNDOS = config('IA_COOLDOWN_SEGUNDOS', default=60 * 5, cast=int)


# Configurações de Logging
LOG_FILE = config('LOG_FILE', default=str(BASE_DIR / 'logs' / 'seoulmuse.log'))
os.makedirs(os.path.dirname(LOG_FILE), exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'file': {
            'level': config('LOG_LEVEL', default='WARNING'),
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOG_FILE,
            'maxBytes': 1024 * 1024 * 5,  # 5 MB
            'backupCount': 5,
            'formatter': 'verbose',
        },
    },
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console', 'file'],
            'level': 'WARNING',
            'propagate': True,
        },
        'seoulmuse': {
            'handlers': ['console', 'file'],
            'level': config('LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
    },
}
