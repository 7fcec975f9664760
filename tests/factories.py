"""Small builders for test data."""

from velvet.models import FileDiff


def make_diff(path: str, added: int, deleted: int) -> FileDiff:
  return FileDiff(path=path, lines_added=added, lines_deleted=deleted, total_changes=added + deleted)
