import json
import os
from pathlib import Path
from typing import List

from pydantic import ValidationError

from mongo_tools.config import CLUSTERS_FILE_NAME
from mongo_tools.errors import ClusterNotFound, DuplicateClusterError
from mongo_tools.helpers.logger import get_logger
from mongo_tools.models import Cluster

logger = get_logger(__name__)


class ClusterStore:
    """
    Named connection strings saved as a JSON array in <config_dir>/clusters.json.

    The directory is created with mode 0700 and the file is written with
    mode 0600 since connection strings usually embed credentials.
    """

    def __init__(self, config_dir):
        self.config_dir = Path(config_dir)
        self.path = self.config_dir / CLUSTERS_FILE_NAME

    @classmethod
    def from_settings(cls, settings) -> "ClusterStore":
        return cls(settings.config_dir)

    def _ensure_config_dir(self):
        if not self.config_dir.exists():
            self.config_dir.mkdir(parents=True, mode=0o700)

    def load(self) -> List[Cluster]:
        """Loads saved clusters. A missing or unreadable file yields an empty list."""
        self._ensure_config_dir()
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [Cluster(**entry) for entry in raw]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable cluster file {self.path}: {e}")
            return []

    def save(self, clusters: List[Cluster]) -> None:
        self._ensure_config_dir()
        payload = [cluster.model_dump() for cluster in clusters]
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        # O_CREAT mode does not apply to an existing file
        os.chmod(self.path, 0o600)

    def get(self, name: str) -> Cluster:
        for cluster in self.load():
            if cluster.name == name:
                return cluster
        raise ClusterNotFound(f"No cluster named '{name}'")

    def add(self, cluster: Cluster) -> None:
        clusters = self.load()
        if any(c.name == cluster.name for c in clusters):
            raise DuplicateClusterError(f"A cluster named '{cluster.name}' already exists.")
        clusters.append(cluster)
        self.save(clusters)
        logger.info(f"Saved cluster '{cluster.name}'")

    def remove(self, name: str) -> None:
        clusters = self.load()
        remaining = [c for c in clusters if c.name != name]
        if len(remaining) == len(clusters):
            raise ClusterNotFound(f"No cluster named '{name}'")
        self.save(remaining)
        logger.info(f"Removed cluster '{name}'")

    def rename(self, old_name: str, new_name: str) -> None:
        clusters = self.load()
        if not any(c.name == old_name for c in clusters):
            raise ClusterNotFound(f"No cluster named '{old_name}'")
        if old_name != new_name and any(c.name == new_name for c in clusters):
            raise DuplicateClusterError(f"A cluster named '{new_name}' already exists.")
        renamed = [
            Cluster(name=new_name, uri=c.uri) if c.name == old_name else c
            for c in clusters
        ]
        self.save(renamed)
