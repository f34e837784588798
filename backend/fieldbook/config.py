# backend/fieldbook/config.py
import os
import secrets

# ログインIDと合成メールアドレスの対応
EMAIL_DOMAIN = os.getenv("FIELDBOOK_EMAIL_DOMAIN", "slf.com")
ADMIN_LOGIN = os.getenv("FIELDBOOK_ADMIN_LOGIN", "admin")

# Publicly known defaults. Rotate them through the environment.
PUBLIC_ADMIN_PASSWORD = "slf@admin"
ADMIN_PASSWORD = os.getenv("FIELDBOOK_ADMIN_PASSWORD", PUBLIC_ADMIN_PASSWORD)
DEFAULT_WORKER_PASSWORD = os.getenv("FIELDBOOK_DEFAULT_WORKER_PASSWORD", "slf@2023")

SECRET_KEY = os.getenv("FIELDBOOK_SECRET_KEY") or secrets.token_urlsafe(32)
TOKEN_ALGORITHM = "HS256"
TOKEN_EXPIRE_MINUTES = int(os.getenv("FIELDBOOK_TOKEN_EXPIRE_MINUTES", str(60 * 8)))

LOG_LEVEL = os.getenv("FIELDBOOK_LOG_LEVEL", "INFO")

DEFAULT_DONORS = ["WHO", "UNICEF", "World Bank", "EU", "USAID", "Local Government"]
