#!/usr/bin/env python3
"""
Demo of lifecycle hooks on instances built by a graph.
"""

from graphboot import GraphBuilder, ModuleDef, post_construct, pre_destroy, validator


class DBConnection:
    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        self.connected = False

    @post_construct
    def connect(self) -> None:
        print(f"[DB] Connecting to {self.connection_string}")
        self.connected = True

    @validator
    def check(self) -> None:
        if not self.connected:
            raise RuntimeError("DB is not connected")

    @pre_destroy
    def disconnect(self) -> None:
        print(f"[DB] Disconnecting from {self.connection_string}")
        self.connected = False

    def query(self, sql: str) -> str:
        assert self.connected, "Not connected to database"
        return f"Result: {sql}"


class MessageQueue:
    def __init__(self, db: DBConnection):
        self.db = db
        self.connected = False

    @post_construct
    def connect(self) -> None:
        print("[MQ] Connecting to message queue")
        self.connected = True

    @pre_destroy
    def disconnect(self) -> None:
        print("[MQ] Disconnecting from message queue")
        self.connected = False

    def send(self, message: str) -> None:
        assert self.connected, "Not connected to message queue"
        print(f"[MQ] Sending: {message} ({self.db.query('SELECT 1')})")


def main() -> None:
    module = ModuleDef()
    module.make(str).using().value("postgresql://localhost:5432/app")
    module.make(DBConnection).using().type(DBConnection)
    module.make(MessageQueue).using().type(MessageQueue)

    graph = GraphBuilder().with_modules(module).build()
    graph.lifecycle_manager.validate()

    print("\nStarting lifecycle")
    with graph:
        graph.locator.get(MessageQueue).send("hello")
        print(f"Managed instances: {len(graph.lifecycle_manager.managed_instances())}")
    print("Lifecycle stopped: resources closed in reverse order")


if __name__ == "__main__":
    main()
