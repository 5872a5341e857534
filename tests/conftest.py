import os
import tempfile

# Keep log files out of the working tree, must run before mongo_tools is imported
os.environ.setdefault("MONGO_TOOLS_LOG_DIR", tempfile.mkdtemp(prefix="mongo-tools-logs-"))

import pytest
from pymongo.errors import CollectionInvalid, ServerSelectionTimeoutError

from mongo_tools.helpers.database.connection_to_db import Connection

ID_INDEX = {"v": 2, "key": {"_id": 1}, "name": "_id_"}


class FakeCollection:
    def __init__(self, cluster, db_name, name):
        self.cluster = cluster
        self.db_name = db_name
        self.name = name

    @property
    def _state(self):
        return self.cluster.collection_state(self.db_name, self.name)

    def find(self, query=None):
        return iter(list(self._state["docs"]))

    def insert_many(self, documents, ordered=True):
        if self.cluster.insert_errors:
            raise self.cluster.insert_errors.pop(0)
        state = self._state
        state["docs"].extend(documents)
        state["batches"].append(len(documents))

    def count_documents(self, query):
        return len(self._state["docs"])

    def list_indexes(self):
        return iter([dict(index) for index in self._state["indexes"]])

    def create_indexes(self, models):
        if self.cluster.index_error is not None:
            raise self.cluster.index_error
        state = self._state
        for model in models:
            document = dict(model.document)
            document["key"] = dict(document["key"])
            document["v"] = 2
            state["indexes"].append(document)
        state["index_calls"] += 1


class FakeDatabase:
    def __init__(self, cluster, name):
        self.cluster = cluster
        self.name = name

    def __getitem__(self, name):
        return FakeCollection(self.cluster, self.name, name)

    def list_collection_names(self, filter=None):
        self.cluster.list_calls += 1
        return list(self.cluster.dbs.get(self.name, {}))

    def create_collection(self, name):
        if name in self.cluster.dbs.get(self.name, {}):
            raise CollectionInvalid(f"collection {name} already exists")
        self.cluster.collection_state(self.name, name)


class FakeAdmin:
    def __init__(self, cluster):
        self.cluster = cluster

    def command(self, name):
        if not self.cluster.reachable:
            raise ServerSelectionTimeoutError("No servers found")
        return {"ok": 1}


class FakeMongoClient:
    def __init__(self, cluster, uri, **kwargs):
        self.cluster = cluster
        self.uri = uri
        self.kwargs = kwargs
        self.admin = FakeAdmin(cluster)
        self.closed = False

    def __getitem__(self, name):
        return FakeDatabase(self.cluster, name)

    def list_databases(self):
        return iter([{"name": name, "sizeOnDisk": 8192} for name in self.cluster.dbs])

    def drop_database(self, name):
        self.cluster.dbs.pop(name, None)

    def close(self):
        self.closed = True


class FakeCluster:
    """In-memory stand-in for one MongoDB deployment."""

    def __init__(self):
        self.dbs = {}
        self.reachable = True
        # Raised, in order, by the next insert_many calls
        self.insert_errors = []
        self.index_error = None
        self.clients = []
        self.list_calls = 0

    def collection_state(self, db_name, name):
        collections = self.dbs.setdefault(db_name, {})
        if name not in collections:
            collections[name] = {
                "docs": [],
                "indexes": [dict(ID_INDEX)],
                "batches": [],
                "index_calls": 0,
            }
        return collections[name]

    def seed(self, db_name, name, documents, indexes=()):
        state = self.collection_state(db_name, name)
        state["docs"].extend(documents)
        state["indexes"].extend(indexes)
        return state

    def docs(self, db_name, name):
        return self.dbs[db_name][name]["docs"]

    def batches(self, db_name, name):
        return self.dbs[db_name][name]["batches"]

    def indexes(self, db_name, name):
        return self.dbs[db_name][name]["indexes"]

    def client_factory(self, uri, **kwargs):
        client = FakeMongoClient(self, uri, **kwargs)
        self.clients.append(client)
        return client


def make_docs(count, prefix="doc"):
    return [{"_id": f"{prefix}-{i}", "n": i} for i in range(count)]


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def other_cluster():
    return FakeCluster()


@pytest.fixture
def connection(cluster):
    conn = Connection(client_factory=cluster.client_factory)
    conn.connect("mongodb://source")
    yield conn
    conn.disconnect()


@pytest.fixture
def other_connection(other_cluster):
    conn = Connection(client_factory=other_cluster.client_factory)
    conn.connect("mongodb://target")
    yield conn
    conn.disconnect()
