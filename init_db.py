#!/usr/bin/env python3
"""
Database initialisation script
Creates every table that does not exist yet
"""
import sys

from auth_service.core.database import Base, init_database


def create_tables():
    try:
        created = init_database()
    except Exception as e:
        print(f"Failed to create database tables: {e}")
        sys.exit(1)

    print("Database tables are ready")
    for table_name in Base.metadata.tables.keys():
        marker = " (created)" if table_name in created else ""
        print(f"  - {table_name}{marker}")


if __name__ == "__main__":
    create_tables()
