from typing import Callable, Optional

from tqdm import tqdm

# (collection name, 1-based position, total collections)
ProgressCallback = Callable[[str, int, int], None]


def log_progress(logger) -> ProgressCallback:
    """Returns a progress callback that writes each position to a logger."""

    def on_collection(name: str, position: int, total: int) -> None:
        logger.info(f"{position}/{total}: {name}")

    return on_collection


class TqdmProgress:
    """
    Progress callback backed by a tqdm bar counting collections.

    The bar is created on the first call, when the total is known, and
    shows the collection currently being transferred.
    """

    def __init__(self, desc: str = "Transferring", disable: bool = False):
        self.desc = desc
        self.disable = disable
        self.bar: Optional[tqdm] = None

    def __call__(self, name: str, position: int, total: int) -> None:
        if self.bar is None:
            self.bar = tqdm(total=total, desc=self.desc, unit="collection", disable=self.disable)
        # Called before the collection moves, so position - 1 are done
        self.bar.n = position - 1
        self.bar.set_postfix_str(name)
        self.bar.refresh()

    def close(self, completed: bool = True) -> None:
        if self.bar is None:
            return
        if completed:
            self.bar.n = self.bar.total
            self.bar.refresh()
        self.bar.close()
        self.bar = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close(completed=exc_type is None)
