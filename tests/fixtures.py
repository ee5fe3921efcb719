"""
Test Fixtures

Common test classes used across test modules
"""

from taginjection import Inject


class Database:
    """Test database class"""

    def __init__(self, dsn: str = "sqlite://"):
        self.dsn = dsn


class UserRepository:
    """Test repository with dependencies"""

    def __init__(self, db: Database):
        self.db = db


class Counter:
    """Injectable counter, increment comes from the container"""
    increment = Inject("counter.increment")

    def __init__(self):
        self.count = 0

    def incr(self) -> int:
        self.count += self.increment
        return self.count


class Greeter:
    """Injectable service composed of a value and another injectable"""
    greeting = Inject("greeting")
    counter = Inject("counter")
