# git_log_parser.py

import json
import logging
from typing import Optional

import git
import git.exc
from git import GitCommandError

from graph_layout_data import GraphEntry

COMMENT_PREFIX = "#"


class EntryFormatError(ValueError):
    """Raised when entry text or JSON cannot be turned into graph entries."""


class HistorySourceError(RuntimeError):
    """Raised when commits cannot be read from a repository."""


def parse_entries(text: str) -> list[GraphEntry]:
    """
    Parses whitespace separated `id parent1 parent2 ...` lines into GraphEntry objects.
    Example: the output of `git rev-list --parents --topo-order HEAD`, or of
    `git log --topo-order --format='%H %P'`.
    Blank lines and lines starting with '#' are skipped. Line order is kept.
    """
    entries = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        current, *parents = line.split()
        entries.append(GraphEntry(current, parents))
    return entries


def parse_entries_json(text: str) -> list[GraphEntry]:
    """
    Parses a JSON array such as `[{"id": "a", "parents": ["b"]}, {"id": "b"}]`.
    """
    try:
        items = json.loads(text)
    except json.JSONDecodeError as e:
        raise EntryFormatError(f"Invalid JSON: {e}") from e

    if not isinstance(items, list):
        raise EntryFormatError("Expected a JSON array of entries")

    entries = []
    for position, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            raise EntryFormatError(f"Entry {position} must be an object with a string 'id'")
        parents = item.get("parents", [])
        if not isinstance(parents, list) or not all(isinstance(p, str) for p in parents):
            raise EntryFormatError(f"Entry {position} ({item['id']}): 'parents' must be an array of strings")
        entries.append(GraphEntry(item["id"], parents))
    return entries


def load_entries_from_repo(
    repo_path: str = ".", rev: str = "HEAD", max_count: Optional[int] = None, all_refs: bool = False
) -> list[GraphEntry]:
    """
    Reads commits from a git repository, children before parents (--topo-order).

    参数：
        repo_path: repository directory
        rev: revision to start from, ignored when all_refs is set
        max_count: window size; parents beyond the window stay listed as parents
        all_refs: read every ref (--all) instead of `rev`
    """
    try:
        repo = git.Repo(repo_path)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise HistorySourceError(f"Not a git repository: {repo_path}") from e

    try:
        # --all walks refs directly, HEAD may be an unborn branch
        has_history = bool(repo.refs) if all_refs else repo.head.is_valid()
        if not has_history:
            # Freshly initialised repository, nothing to show
            logging.info("Repository %s has no commits yet", repo_path)
            return []

        kwargs = {"topo_order": True}
        if max_count is not None:
            kwargs["max_count"] = max_count
        commits = repo.iter_commits("--all" if all_refs else rev, **kwargs)

        entries = [GraphEntry(commit.hexsha, [parent.hexsha for parent in commit.parents]) for commit in commits]
    except (GitCommandError, ValueError) as e:
        raise HistorySourceError(f"Failed to read history of {repo_path} at {rev}: {e}") from e
    finally:
        repo.close()

    logging.debug("Loaded %d commits from %s", len(entries), repo_path)
    return entries
