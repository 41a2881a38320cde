from app import create_app
from errors import ValidationError
from extensions import store
from models import ROLES, UserRepository

app = create_app()

def create_user(username, password, role):
    with app.app_context():
        users = UserRepository(store)
        # Проверка на уникальность логина
        existing_user = users.find_by_username(username)
        if existing_user:
            print(f"⚠️  User '{username}' already exists with role '{existing_user.get('role')}'.")
            return

        try:
            user = users.create({"username": username, "password": password, "role": role})
        except ValidationError as exc:
            print(f"❌ {exc.message}: {exc.errors}")
            return
        print(f"✅ Created user: {user['username']} (role: {user['role']})")

if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Create a new user.')
    parser.add_argument('username', help='Username')
    parser.add_argument('password', help='Password')
    parser.add_argument('role', choices=list(ROLES), help='User role')

    args = parser.parse_args()
    create_user(args.username, args.password, args.role)
