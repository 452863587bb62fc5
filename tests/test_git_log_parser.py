import os
import shutil
import sys
import tempfile
import unittest

import git  # Make sure 'gitpython' is installed in the test environment

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from git_log_parser import (
    EntryFormatError,
    HistorySourceError,
    load_entries_from_repo,
    parse_entries,
    parse_entries_json,
)
from graph_layout import calculate_layout
from graph_layout_data import GraphEntry


class TestParseEntries(unittest.TestCase):
    def test_rev_list_style_lines(self):
        text = "# newest first\nm p1 p2\n\np1 root\np2 root\nroot\n"
        entries = parse_entries(text)

        self.assertEqual(
            entries,
            [
                GraphEntry("m", ("p1", "p2")),
                GraphEntry("p1", ("root",)),
                GraphEntry("p2", ("root",)),
                GraphEntry("root", ()),
            ],
        )

    def test_extra_whitespace(self):
        entries = parse_entries("  a \t b  \n")
        self.assertEqual(entries, [GraphEntry("a", ("b",))])

    def test_empty_text(self):
        self.assertEqual(parse_entries(""), [])


class TestParseEntriesJson(unittest.TestCase):
    def test_valid_array(self):
        entries = parse_entries_json('[{"id": "a", "parents": ["b"]}, {"id": "b"}]')
        self.assertEqual(entries, [GraphEntry("a", ("b",)), GraphEntry("b", ())])

    def test_invalid_json(self):
        with self.assertRaises(EntryFormatError):
            parse_entries_json("[{")

    def test_not_an_array(self):
        with self.assertRaises(EntryFormatError):
            parse_entries_json('{"id": "a"}')

    def test_missing_id(self):
        with self.assertRaisesRegex(EntryFormatError, "Entry 1"):
            parse_entries_json('[{"id": "a"}, {"parents": []}]')

    def test_bad_parents(self):
        with self.assertRaisesRegex(EntryFormatError, "parents"):
            parse_entries_json('[{"id": "a", "parents": "b"}]')

    def test_is_a_value_error(self):
        with self.assertRaises(ValueError):
            parse_entries_json("not json")


class TestLoadEntriesFromRepo(unittest.TestCase):
    def setUp(self):
        self.repo_path = tempfile.mkdtemp()
        self.repo = git.Repo.init(self.repo_path)

    def tearDown(self):
        self.repo.close()
        shutil.rmtree(self.repo_path)

    def _commit(self, name, message, **kwargs):
        file_path = os.path.join(self.repo_path, name)
        with open(file_path, "w") as f:
            f.write(message)
        self.repo.index.add([name])
        return self.repo.index.commit(message, **kwargs)

    def _build_merge_history(self):
        root = self._commit("root.txt", "root")
        main_tip = self._commit("main.txt", "main work")
        side = self._commit("side.txt", "side work", parent_commits=[root], head=False)
        merge = self._commit("merge.txt", "merge", parent_commits=[main_tip, side])
        return root, main_tip, side, merge

    def test_empty_repository(self):
        self.assertEqual(load_entries_from_repo(self.repo_path), [])

    def test_not_a_repository(self):
        plain_dir = tempfile.mkdtemp()
        try:
            with self.assertRaises(HistorySourceError):
                load_entries_from_repo(plain_dir)
        finally:
            shutil.rmtree(plain_dir)

    def test_missing_path(self):
        with self.assertRaises(HistorySourceError):
            load_entries_from_repo(os.path.join(self.repo_path, "does-not-exist"))

    def test_unknown_revision(self):
        self._commit("root.txt", "root")
        with self.assertRaises(HistorySourceError):
            load_entries_from_repo(self.repo_path, rev="no-such-branch")

    def test_children_before_parents(self):
        root, main_tip, side, merge = self._build_merge_history()
        entries = load_entries_from_repo(self.repo_path)

        self.assertEqual(len(entries), 4)
        self.assertEqual(entries[0], GraphEntry(merge.hexsha, (main_tip.hexsha, side.hexsha)))
        self.assertEqual(entries[-1], GraphEntry(root.hexsha, ()))
        position = {entry.current: index for index, entry in enumerate(entries)}
        for index, entry in enumerate(entries):
            for parent in entry.parents:
                self.assertGreater(position[parent], index)

    def test_layout_of_loaded_history(self):
        self._build_merge_history()
        layout = calculate_layout(load_entries_from_repo(self.repo_path))

        self.assertEqual(layout.lane_count, 2)
        self.assertEqual(layout[0].parent_lanes, (0, 1))
        self.assertEqual(layout[-1].lane, 0)
        self.assertEqual(sorted(layout[-1].child_lanes), [0, 1])

    def test_max_count_keeps_parents_outside_window(self):
        root, main_tip, side, merge = self._build_merge_history()
        entries = load_entries_from_repo(self.repo_path, max_count=1)

        self.assertEqual(entries, [GraphEntry(merge.hexsha, (main_tip.hexsha, side.hexsha))])
        layout = calculate_layout(entries)
        self.assertEqual(layout[0].passthrough_lanes, {main_tip.hexsha: 0, side.hexsha: 1})

    def test_all_refs_includes_unmerged_branch(self):
        root = self._commit("root.txt", "root")
        self._commit("main.txt", "main work")
        other = self._commit("other.txt", "unmerged", parent_commits=[root], head=False)
        self.repo.create_head("other", other)

        head_only = load_entries_from_repo(self.repo_path)
        everything = load_entries_from_repo(self.repo_path, all_refs=True)

        self.assertNotIn(other.hexsha, [entry.current for entry in head_only])
        self.assertIn(other.hexsha, [entry.current for entry in everything])
        self.assertEqual(len(everything), 3)

    def test_all_refs_on_unborn_branch(self):
        root = self._commit("root.txt", "root")
        self.repo.git.checkout("--orphan", "fresh")

        self.assertEqual(load_entries_from_repo(self.repo_path), [])
        self.assertEqual(load_entries_from_repo(self.repo_path, all_refs=True), [GraphEntry(root.hexsha, ())])

    def test_all_refs_on_empty_repository(self):
        self.assertEqual(load_entries_from_repo(self.repo_path, all_refs=True), [])


if __name__ == "__main__":
    unittest.main()
