#!/usr/bin/env python3
"""Create the first administrator account.

Usage:
    python scripts/create_admin.py <email> <first_name> [last_name] [role]

Role defaults to super_admin. The password is prompted for and must satisfy
the password policy. Tables are created if they do not exist yet.
"""

import sys
from getpass import getpass

from dotenv import load_dotenv

load_dotenv()

from hrms.config.database import SessionLocal, init_db  # noqa: E402
from hrms.middleware.error_handler import APIError  # noqa: E402
from hrms.schemas.employees import EmployeeCreate  # noqa: E402
from hrms.services.employees import EmployeeService  # noqa: E402


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)

    email, first_name = sys.argv[1], sys.argv[2]
    last_name = sys.argv[3] if len(sys.argv) > 3 else ""
    role = sys.argv[4] if len(sys.argv) > 4 else "super_admin"

    password = getpass("Password: ")
    if password != getpass("Repeat password: "):
        print("Passwords do not match")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        employee = EmployeeService(db).create(
            EmployeeCreate(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password=password,
                hrms_role=role,
                designation="Administrator",
            )
        )
    except APIError as e:
        print(f"Failed: {e.message}")
        sys.exit(1)
    finally:
        db.close()

    print(f"Created {employee.hrms_role} {employee.employee_code} ({employee.email})")


if __name__ == "__main__":
    main()
