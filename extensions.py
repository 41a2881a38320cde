from flask_login import LoginManager

from blobs import ImageStore
from store import RecordStore

# Инициализация расширений без привязки к конкретному приложению

# Хранилище коллекций (JSON-файлы)
store = RecordStore()

# Хранилище фотографий
image_store = ImageStore()

# Авторизация и управление пользователями
login_manager = LoginManager()
