# -*- coding: utf-8 -*-
"""
init_store.py - утилита для инициализации JSON-коллекций склада.

Режимы:
- python init_store.py --create    → создать НЕДОСТАЮЩИЕ файлы коллекций (без потери данных)
- python init_store.py --reset     → очистить коллекции запчастей, дисков и шаблонов
                                     (ВНИМАНИЕ: данные будут удалены; пользователи не трогаются)
"""

import argparse

from app import create_app
from extensions import store
from modules.oem_parts.models import OEM_PARTS_SLOT
from modules.wheel_templates.models import WHEEL_TEMPLATES_SLOT
from modules.wheels.models import WHEELS_SLOT
from models import USERS_SLOT

INVENTORY_SLOTS = (OEM_PARTS_SLOT, WHEELS_SLOT, WHEEL_TEMPLATES_SLOT)


def reset_inventory_slots():
    """Перезаписываем коллекции пустыми массивами (фото на диске не удаляются)."""
    for slot in INVENTORY_SLOTS:
        store.reset_slot(slot)


def create_missing_slots():
    """Создаёт недостающие файлы коллекций (существующие не трогаются)."""
    store.ensure_slots(INVENTORY_SLOTS + (USERS_SLOT,))


def main():
    parser = argparse.ArgumentParser(description="Init inventory JSON collections")
    grp = parser.add_mutually_exclusive_group(required=True)
    grp.add_argument("--create", action="store_true", help="создать недостающие коллекции (без удаления)")
    grp.add_argument("--reset", action="store_true", help="очистить коллекции склада (данные будут потеряны)")

    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.reset:
            print("→ Resetting inventory collections …")
            reset_inventory_slots()
            print(f"✔ Готово: коллекции очищены в {store.root}.")
        elif args.create:
            print("→ Creating missing collections …")
            create_missing_slots()
            print(f"✔ Готово: недостающие коллекции созданы в {store.root}.")


if __name__ == "__main__":
    main()
