#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from dating.config import load_settings
from dating.errors import DatingError
from dating.infra.user_repo import UserStore
from dating.services import account_service


def main() -> None:
    settings = load_settings()
    store = UserStore.for_path(settings.db_path)
    store.init_schema()

    name = input("Name: ").strip()
    email = input("Email: ").strip()
    bio = input("Bio: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        store.close()
        raise SystemExit("Passwords do not match")

    try:
        user_id = account_service.register(store, {"name": name, "email": email, "password": pw1, "bio": bio})
    except DatingError as exc:
        raise SystemExit(exc.message)
    finally:
        store.close()
    print(f"OK -> user id {user_id} in {settings.db_path}")


if __name__ == "__main__":
    main()
