import os
from datetime import timedelta

MB = 1024 * 1024


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev_secret_key')

    # one JSON file per collection lives here
    DATA_FOLDER = os.getenv('DATA_FOLDER', 'data')

    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', 'uploads')
    UPLOAD_URL_PREFIX = '/uploads/'
    MAX_FILE_SIZE = int(os.getenv('MAX_FILE_SIZE', 10 * MB))
    MAX_FILES = int(os.getenv('MAX_FILES', 10))
    MAX_CONTENT_LENGTH = MAX_FILE_SIZE * MAX_FILES + MB

    LOW_STOCK_THRESHOLD = int(os.getenv('LOW_STOCK_THRESHOLD', 5))

    # seeded only when the users collection is empty
    DEFAULT_ADMIN_USERNAME = os.getenv('DEFAULT_ADMIN_USERNAME', 'admin')
    DEFAULT_ADMIN_PASSWORD = os.getenv('DEFAULT_ADMIN_PASSWORD', 'admin123')

    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
