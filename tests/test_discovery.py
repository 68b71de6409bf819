"""Tests for project root location and manifest discovery on disk."""

import unittest
import tempfile
from pathlib import Path

from discovery import (
    BASE_MANIFEST,
    OVERRIDE_MANIFEST,
    ROOT_MARKER,
    discover_manifests,
    find_manifest_sets,
    find_project_root,
)

URL_A = 'https://www.notion.so/Alpha-' + 'a' * 32
URL_B = 'https://www.notion.so/Beta-' + 'b' * 32
URL_C = 'https://www.notion.so/Gamma-' + 'c' * 32


def write(path: Path, content: str = '') -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


class TestFindProjectRoot(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name).resolve()

    def tearDown(self):
        self._tmp.cleanup()

    def test_marker_in_ancestor(self):
        write(self.tmp / 'project' / ROOT_MARKER)
        start = self.tmp / 'project' / 'src' / 'deep'
        start.mkdir(parents=True)
        self.assertEqual(find_project_root(start), self.tmp / 'project')

    def test_marker_in_start_directory(self):
        write(self.tmp / 'project' / 'src' / ROOT_MARKER)
        write(self.tmp / 'project' / ROOT_MARKER)
        start = self.tmp / 'project' / 'src'
        self.assertEqual(find_project_root(start), start)

    def test_closest_marker_wins(self):
        write(self.tmp / ROOT_MARKER)
        write(self.tmp / 'inner' / ROOT_MARKER)
        start = self.tmp / 'inner' / 'pkg'
        start.mkdir(parents=True)
        self.assertEqual(find_project_root(start), self.tmp / 'inner')

    def test_directory_named_like_marker_is_ignored(self):
        (self.tmp / 'a' / ROOT_MARKER).mkdir(parents=True)
        write(self.tmp / ROOT_MARKER)
        self.assertEqual(find_project_root(self.tmp / 'a'), self.tmp)

    def test_no_marker_returns_start(self):
        start = self.tmp / 'lonely'
        start.mkdir()
        # Ancestors of the temp dir are not expected to carry a marker
        self.assertEqual(find_project_root(start), start)


class TestFindManifestSets:
    """Grouping manifest files by directory."""

    def test_groups_base_and_override_per_directory(self, tmp_path):
        write(tmp_path / BASE_MANIFEST, URL_A)
        write(tmp_path / 'docs' / BASE_MANIFEST, URL_B)
        write(tmp_path / 'docs' / OVERRIDE_MANIFEST, URL_C)
        write(tmp_path / 'local' / OVERRIDE_MANIFEST, URL_C)

        sets = {s.directory: s for s in find_manifest_sets(tmp_path)}

        assert set(sets) == {tmp_path, tmp_path / 'docs', tmp_path / 'local'}
        assert sets[tmp_path / 'docs'].base_path == tmp_path / 'docs' / BASE_MANIFEST
        assert sets[tmp_path / 'docs'].override_path == tmp_path / 'docs' / OVERRIDE_MANIFEST
        assert sets[tmp_path / 'local'].base_path is None

    def test_skips_excluded_directories(self, tmp_path):
        for skipped in ('.git', 'node_modules', '__pycache__', 'spoketome'):
            write(tmp_path / skipped / BASE_MANIFEST, URL_A)
        write(tmp_path / 'pkg' / 'node_modules' / 'dep' / BASE_MANIFEST, URL_A)
        write(tmp_path / 'pkg' / BASE_MANIFEST, URL_B)

        directories = [s.directory for s in find_manifest_sets(tmp_path)]

        assert directories == [tmp_path / 'pkg']

    def test_root_named_like_skipped_directory_is_searched(self, tmp_path):
        root = tmp_path / 'node_modules'
        write(root / BASE_MANIFEST, URL_A)
        write(root / 'sub' / BASE_MANIFEST, URL_B)

        directories = {s.directory for s in find_manifest_sets(root)}

        assert directories == {root, root / 'sub'}

    def test_extra_skip_dirs(self, tmp_path):
        write(tmp_path / 'build' / BASE_MANIFEST, URL_A)
        write(tmp_path / 'src' / BASE_MANIFEST, URL_B)

        directories = [s.directory for s in find_manifest_sets(tmp_path, extra_skip_dirs=['build'])]

        assert directories == [tmp_path / 'src']

    def test_similar_names_are_not_manifests(self, tmp_path):
        write(tmp_path / '.spoketome.bak', URL_A)
        write(tmp_path / 'spoketome.txt', URL_A)
        assert find_manifest_sets(tmp_path) == []


class TestDiscoverManifests:
    """Resolving every discovered directory."""

    def test_exclude_one_and_add_one(self, tmp_path):
        write(tmp_path / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")
        write(tmp_path / OVERRIDE_MANIFEST, f"!{URL_A}\n{URL_C}\n")

        manifests = discover_manifests(tmp_path)

        assert len(manifests) == 1
        assert [e.url for e in manifests[0].entries] == [URL_B, URL_C]
        assert manifests[0].output_dir == tmp_path / 'spoketome'
        assert manifests[0].sources == [tmp_path / BASE_MANIFEST, tmp_path / OVERRIDE_MANIFEST]

    def test_directories_without_entries_are_dropped(self, tmp_path):
        write(tmp_path / 'empty' / BASE_MANIFEST, "# nothing yet\n")
        write(tmp_path / 'excluded' / BASE_MANIFEST, f"{URL_A}\n")
        write(tmp_path / 'excluded' / OVERRIDE_MANIFEST, f"!{URL_A}\n")
        write(tmp_path / 'real' / BASE_MANIFEST, f"{URL_B}\n")

        manifests = discover_manifests(tmp_path)

        assert [m.directory for m in manifests] == [tmp_path / 'real']

    def test_no_manifests(self, tmp_path):
        write(tmp_path / 'README.md', '# hi')
        assert discover_manifests(tmp_path) == []
        assert not (tmp_path / 'spoketome').exists()

    def test_generated_output_is_not_rediscovered(self, tmp_path):
        write(tmp_path / BASE_MANIFEST, f"{URL_A}\n")
        write(tmp_path / 'spoketome' / BASE_MANIFEST, f"{URL_B}\n")

        manifests = discover_manifests(tmp_path)

        assert [m.directory for m in manifests] == [tmp_path]


if __name__ == '__main__':
    unittest.main()
