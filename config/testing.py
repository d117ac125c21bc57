import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_ops_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TIMEZONE = None
GATE_DENY_UNSCHEDULED = False

BARCODE_PREFIX = "EDW"
CURRENCY_LABEL = "PKR"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
