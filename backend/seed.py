from __future__ import annotations

import os
from getpass import getpass

from files_manager import create_app
from files_manager.extensions import db
from files_manager.models import User


def main() -> None:
    app = create_app()

    with app.app_context():
        db.create_all()

        email = os.getenv("SEED_EMAIL", "admin@example.com").strip().lower()
        password = os.getenv("SEED_PASSWORD")
        if not password:
            password = getpass("Password: ")

        user = User.query.filter_by(email=email).one_or_none()
        created = False
        if user is None:
            user = User(email=email)
            created = True

        user.set_password(password)
        db.session.add(user)
        db.session.commit()

        print(f"{'Created' if created else 'Updated'} user: {email}")


if __name__ == "__main__":
    main()
