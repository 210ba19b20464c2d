# create_user.py
# Seeds an owner or approver identity into the configured record store.
import sys

from contracts.adapters.identity_directory import RecordStoreIdentityDirectory
from contracts.adapters.sqlite_record_store import SQLiteRecordStore
from core.config.config_service import config_service
from core.exceptions.errors import ConflictError


def read_input(prompt: str) -> str:
    try:
        return input(prompt)
    except (EOFError, KeyboardInterrupt):
        print("\nAborted")
        sys.exit(1)


def main() -> int:
    store = SQLiteRecordStore(config_service.app_config().database.records)
    directory = RecordStoreIdentityDirectory(store)

    full_name = read_input("Full name: ").strip()
    while not full_name:
        print("Name must not be empty.")
        full_name = read_input("Full name: ").strip()

    email = read_input("E-mail: ").strip().lower()
    role = read_input("Role [user/approver/admin] (user): ").strip().lower() or "user"

    try:
        existing = directory.get_by_email(email)
        if existing is not None:
            print(f"User already exists (id={existing.id})")
            return 1
        user = directory.register(full_name=full_name, email=email, role=role)
    except ConflictError:
        print("User already exists")
        return 1
    finally:
        store.close()

    print(f"User created (id={user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
