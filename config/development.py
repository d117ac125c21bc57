import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_ops"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Wall clock used by the gate (classes are scheduled in campus local time)
TIMEZONE = os.getenv("TIMEZONE", "Asia/Karachi")

# 1 = a student whose class has no schedule is turned away at the gate
GATE_DENY_UNSCHEDULED = bool(int(os.getenv("GATE_DENY_UNSCHEDULED", "0")))

BARCODE_PREFIX = os.getenv("BARCODE_PREFIX", "EDW")
CURRENCY_LABEL = os.getenv("CURRENCY_LABEL", "PKR")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also load demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
