import pytest

from conftest import make_docs
from mongo_tools import cli
from mongo_tools.helpers.database.connection_to_db import Connection


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    path = tmp_path / "config"
    monkeypatch.setenv("MONGO_TOOLS_CONFIG_DIR", str(path))
    return path


@pytest.fixture
def fake_connections(cluster, monkeypatch):
    opened = []

    def open_connection(settings, uri):
        connection = Connection(client_factory=cluster.client_factory)
        connection.connect(uri)
        opened.append(uri)
        return connection

    monkeypatch.setattr(cli, "open_connection", open_connection)
    return opened


def test_cluster_commands(capsys):
    assert cli.main(["clusters", "add", "prod", "mongodb://prod"]) == 0
    assert cli.main(["clusters", "rename", "prod", "production"]) == 0
    assert cli.main(["clusters", "list"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "production"


def test_duplicate_cluster_is_an_error(capsys):
    cli.main(["clusters", "add", "prod", "mongodb://prod"])
    assert cli.main(["clusters", "add", "prod", "mongodb://other"]) == 1
    assert "already exists" in capsys.readouterr().err


def test_unknown_cluster_is_an_error(capsys):
    assert cli.main(["databases", "--cluster", "nope"]) == 1
    assert "nope" in capsys.readouterr().err


def test_saved_cluster_is_used(cluster, fake_connections, capsys):
    cluster.seed("shop", "orders", make_docs(2))
    cli.main(["clusters", "add", "prod", "mongodb://prod"])

    assert cli.main(["databases", "--cluster", "prod"]) == 0

    assert fake_connections == ["mongodb://prod"]
    assert "shop" in capsys.readouterr().out


def test_stats(cluster, fake_connections, capsys):
    cluster.seed("shop", "a", make_docs(10))
    cluster.seed("shop", "b", make_docs(5))

    assert cli.main(["stats", "--uri", "mongodb://x", "shop"]) == 0

    assert "Total: 2 collection(s), 15 document(s)" in capsys.readouterr().out


def test_export_and_import(cluster, fake_connections, tmp_path, capsys):
    cluster.seed("shop", "orders", make_docs(3))
    out_dir = tmp_path / "dump"

    assert cli.main(["export", "--uri", "mongodb://x", "shop", "--out", str(out_dir)]) == 0
    assert (out_dir / "orders.jsonl").exists()

    assert cli.main(["import", "--uri", "mongodb://x", str(out_dir), "restored"]) == 0
    assert len(cluster.docs("restored", "orders")) == 3


def test_import_missing_directory(fake_connections, tmp_path, capsys):
    assert cli.main(["import", "--uri", "mongodb://x", str(tmp_path / "missing"), "restored"]) == 1
    assert "Directory not found" in capsys.readouterr().err


def test_clone(cluster, fake_connections):
    cluster.seed("shop", "orders", make_docs(3))

    assert cli.main(["clone", "--uri", "mongodb://x", "shop", "copy"]) == 0

    assert len(cluster.docs("copy", "orders")) == 3


def test_drop_with_confirmation_flag(cluster, fake_connections):
    cluster.seed("shop", "orders", make_docs(3))

    assert cli.main(["drop", "--uri", "mongodb://x", "shop", "--yes"]) == 0

    assert "shop" not in cluster.dbs


def test_drop_cancelled(cluster, fake_connections, monkeypatch):
    cluster.seed("shop", "orders", make_docs(3))
    monkeypatch.setattr("builtins.input", lambda prompt: "no")

    assert cli.main(["drop", "--uri", "mongodb://x", "shop"]) == 0

    assert "shop" in cluster.dbs
