"""Shared fixtures: a throwaway SQLite database wired into the settings."""

import sqlite3

import pytest

from sqlgate.config import get_settings

NUM_CUSTOMERS = 130


@pytest.fixture
def database_path(tmp_path):
    path = tmp_path / "test.db"
    conn = sqlite3.connect(path)
    try:
        conn.executescript("""
            CREATE TABLE customers (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT,
                region TEXT NOT NULL
            );
            CREATE TABLE orders (
                id INTEGER PRIMARY KEY,
                customer_id INTEGER NOT NULL,
                amount REAL NOT NULL,
                FOREIGN KEY (customer_id) REFERENCES customers(id)
            );
            CREATE INDEX idx_orders_customer ON orders(customer_id);
        """)
        conn.executemany(
            "INSERT INTO customers (id, name, email, region) VALUES (?, ?, ?, ?)",
            [
                (i, f"Customer {i}", None if i % 10 == 0 else f"c{i}@example.com", "North" if i % 2 else "South")
                for i in range(1, NUM_CUSTOMERS + 1)
            ],
        )
        conn.executemany(
            "INSERT INTO orders (id, customer_id, amount) VALUES (?, ?, ?)",
            [(i, (i % NUM_CUSTOMERS) + 1, 10.5 * i) for i in range(1, 21)],
        )
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture
def configured_env(monkeypatch, database_path):
    """Point the server at the test database with default limits."""
    monkeypatch.setenv("DATABASE_PATH", database_path)
    monkeypatch.delenv("READONLY", raising=False)
    monkeypatch.delenv("MAX_RESULT_SET", raising=False)
    get_settings.cache_clear()
    yield database_path
    get_settings.cache_clear()


@pytest.fixture
def read_only_env(monkeypatch, configured_env):
    monkeypatch.setenv("READONLY", "true")
    get_settings.cache_clear()
    return configured_env
