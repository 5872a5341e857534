import argparse
import logging
import sys

from pymongo.errors import PyMongoError

from mongo_tools.config import ToolSettings
from mongo_tools.errors import MongoToolsError
from mongo_tools.helpers.database import catalog
from mongo_tools.helpers.database.cluster_store import ClusterStore
from mongo_tools.helpers.database.connection_to_db import Connection
from mongo_tools.helpers.logger import get_logger, set_level
from mongo_tools.models import Cluster
from mongo_tools.pipelines import (
    default_export_dir,
    run_clone,
    run_cross_cluster_clone,
    run_drop,
    run_export,
    run_import,
)
from mongo_tools.transfer.engine import TransferEngine
from mongo_tools.transfer.progress import TqdmProgress

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mongo-tools",
        description="Clone, export and import MongoDB databases",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Cluster registry
    clusters = subparsers.add_parser("clusters", help="Manage saved clusters")
    cluster_commands = clusters.add_subparsers(dest="cluster_command", required=True)
    cluster_commands.add_parser("list", help="List saved clusters")
    add = cluster_commands.add_parser("add", help="Save a cluster")
    add.add_argument("name")
    add.add_argument("uri")
    remove = cluster_commands.add_parser("remove", help="Forget a cluster")
    remove.add_argument("name")
    rename = cluster_commands.add_parser("rename", help="Rename a cluster")
    rename.add_argument("old_name")
    rename.add_argument("new_name")

    def add_cluster_options(sub):
        group = sub.add_mutually_exclusive_group(required=True)
        group.add_argument("--cluster", help="Name of a saved cluster")
        group.add_argument("--uri", help="MongoDB connection string")

    databases = subparsers.add_parser("databases", help="List databases")
    add_cluster_options(databases)

    stats = subparsers.add_parser("stats", help="Show collections and document counts")
    add_cluster_options(stats)
    stats.add_argument("database")

    clone = subparsers.add_parser("clone", help="Clone a database")
    add_cluster_options(clone)
    clone.add_argument("source_db")
    clone.add_argument("target_db")
    target = clone.add_mutually_exclusive_group()
    target.add_argument("--target-cluster", help="Saved cluster to clone into")
    target.add_argument("--target-uri", help="Connection string of the cluster to clone into")
    clone.add_argument("--keep-target", action="store_true", help="Do not drop the target database first")

    export = subparsers.add_parser("export", help="Export a database to a directory")
    add_cluster_options(export)
    export.add_argument("database")
    export.add_argument("--out", help="Output directory (default: <database>-<timestamp>)")

    import_ = subparsers.add_parser("import", help="Import a directory into a database")
    add_cluster_options(import_)
    import_.add_argument("directory")
    import_.add_argument("database")
    import_.add_argument("--keep-target", action="store_true", help="Do not drop the target database first")

    drop = subparsers.add_parser("drop", help="Drop a database")
    add_cluster_options(drop)
    drop.add_argument("database")
    drop.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    return parser


def resolve_uri(store: ClusterStore, cluster_name=None, uri=None) -> str:
    if uri:
        return uri
    return store.get(cluster_name).uri


def open_connection(settings: ToolSettings, uri: str) -> Connection:
    connection = Connection.from_settings(settings)
    connection.connect(uri)
    return connection


def print_summary(title, result):
    print(f"{title}: {result.collections} collection(s), {result.documents:,} document(s)")


def handle_clusters(args, store: ClusterStore):
    if args.cluster_command == "list":
        for cluster in store.load():
            print(cluster.name)
    elif args.cluster_command == "add":
        store.add(Cluster(name=args.name, uri=args.uri))
        print(f"Cluster '{args.name}' saved.")
    elif args.cluster_command == "remove":
        store.remove(args.name)
        print(f"Cluster '{args.name}' removed.")
    elif args.cluster_command == "rename":
        store.rename(args.old_name, args.new_name)
        print(f"Cluster '{args.old_name}' renamed to '{args.new_name}'.")


def handle_command(args, settings: ToolSettings, store: ClusterStore):
    engine = TransferEngine.from_settings(settings)
    uri = resolve_uri(store, args.cluster, args.uri)

    with open_connection(settings, uri) as connection:
        if args.command == "databases":
            for db in catalog.list_databases(connection):
                print(f"{db.name}\t{db.size_on_disk or 0}")

        elif args.command == "stats":
            stats = catalog.get_stats(connection, args.database)
            for collection in stats.collections:
                print(f"{collection.name}\t{collection.count}")
            print(f"Total: {len(stats.collections)} collection(s), {stats.total_documents:,} document(s)")

        elif args.command == "clone":
            with TqdmProgress("Cloning") as progress:
                if args.target_cluster or args.target_uri:
                    target_uri = resolve_uri(store, args.target_cluster, args.target_uri)
                    with open_connection(settings, target_uri) as target_connection:
                        result = run_cross_cluster_clone(
                            connection,
                            target_connection,
                            args.source_db,
                            args.target_db,
                            replace=not args.keep_target,
                            on_collection=progress,
                            engine=engine,
                        )
                else:
                    result = run_clone(
                        connection,
                        args.source_db,
                        args.target_db,
                        replace=not args.keep_target,
                        on_collection=progress,
                        engine=engine,
                    )
            print_summary("Clone complete", result)

        elif args.command == "export":
            out_dir = args.out or default_export_dir(args.database)
            with TqdmProgress("Exporting") as progress:
                result = run_export(
                    connection,
                    args.database,
                    out_dir,
                    on_collection=progress,
                    engine=engine,
                    json_mode=settings.json_mode,
                )
            print_summary("Download complete", result)
            print(f"Saved to: {result.output_path}")

        elif args.command == "import":
            with TqdmProgress("Importing") as progress:
                result = run_import(
                    connection,
                    args.directory,
                    args.database,
                    replace=not args.keep_target,
                    on_collection=progress,
                    engine=engine,
                )
            print_summary("Upload complete", result)

        elif args.command == "drop":
            if not args.yes:
                confirmation = input(f"Type '{args.database}' to drop it permanently: ")
                if confirmation != args.database:
                    print("Drop cancelled.")
                    return
            stats = run_drop(connection, args.database)
            print(f"Dropped '{args.database}' ({stats.total_documents:,} document(s)).")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    try:
        settings = ToolSettings.from_env()
        store = ClusterStore.from_settings(settings)
        if args.command == "clusters":
            handle_clusters(args, store)
        else:
            handle_command(args, settings, store)
    except (MongoToolsError, PyMongoError, ValueError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
