import asyncio

import pytest
from fastapi.testclient import TestClient

from fraud_monitor import config, database
from fraud_monitor.main import create_app


class RecordingTransport:
    """Stands in for ConnectionManager; records every emit"""
    def __init__(self):
        self.calls = []

    def emit(self, event, data, room=None):
        self.calls.append({"event": event, "data": data, "room": room})
        return 1

    def events(self):
        return [c["event"] for c in self.calls]


class BrokenTransport:
    def emit(self, event, data, room=None):
        raise ConnectionError("push channel down")


class FakeWebSocket:
    def __init__(self, fail=False, hang=False):
        self.sent = []
        self.accepted = False
        self.closed = False
        self.fail = fail
        self.hang = hang

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket gone")
        if self.hang:
            await asyncio.Event().wait()
        self.sent.append(data)

    def events(self):
        return [m["event"] for m in self.sent]

    def broadcasts(self):
        return [m for m in self.sent if m["event"] != "connect"]

    async def close(self):
        self.closed = True


class FakeCursor:
    def __init__(self, docs):
        self.docs = list(docs)

    def sort(self, key, direction):
        self.docs.sort(key=lambda d: d[key], reverse=direction == -1)
        return self

    def skip(self, n):
        self.docs = self.docs[n:]
        return self

    def limit(self, n):
        self.docs = self.docs[:n]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self.docs:
            yield dict(doc)


class FakeCollection:
    def __init__(self, docs):
        self.docs = docs
        self.queries = []

    def find(self, query):
        self.queries.append(query)
        return FakeCursor(d for d in self.docs if all(d.get(k) == v for k, v in query.items()))


class FakeDatabase:
    def __init__(self, predictions=()):
        self.predictions = FakeCollection(list(predictions))


@pytest.fixture(autouse=True)
def no_mongo(monkeypatch):
    monkeypatch.setattr(config, "MONGODB_URL", None)
    monkeypatch.setattr(database, "async_client", None)
    monkeypatch.setattr(database, "database", None)
    yield


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def app():
    return create_app()


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c
