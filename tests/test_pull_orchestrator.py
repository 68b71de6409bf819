"""End-to-end tests for a pull run with a stubbed fetcher."""

from pathlib import Path

import pytest
import yaml

from discovery import BASE_MANIFEST, OVERRIDE_MANIFEST, ROOT_MARKER
from exporters import CONTEXT_FILENAME, sanitize_filename
from fetchers import BaseFetcher, FetcherError
from models import PropertyValue, PulledDocument
from orchestrator import PullOrchestrator

URL_A = 'https://www.notion.so/Alpha-' + 'a' * 32
URL_B = 'https://www.notion.so/Beta-' + 'b' * 32
URL_C = 'https://www.notion.so/Gamma-' + 'c' * 32


class StubFetcher(BaseFetcher):
    """Returns canned documents; URLs in `failing` raise FetcherError."""

    def __init__(self, titles=None, failing=()):
        super().__init__({})
        self.titles = titles or {}
        self.failing = set(failing)
        self.fetched = []

    def fetch_document(self, entry):
        self.fetched.append(entry.url)
        if entry.url in self.failing:
            raise FetcherError(f"Failed to fetch page {entry.page_id}: 404")

        title = self.titles.get(entry.url, entry.url.rsplit('/', 1)[-1].split('-')[0])
        return PulledDocument(
            title=title,
            page_id=entry.page_id,
            url=entry.url,
            markdown=f'# {title}\n',
            last_edited_time='2024-04-30T08:15:00.000Z',
            sanitized_filename=sanitize_filename(title),
            properties={'Status': PropertyValue.scalar('Done')},
        )


def write(path: Path, content: str = '') -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


@pytest.fixture
def project(tmp_path):
    write(tmp_path / ROOT_MARKER)
    return tmp_path


def read_context(output_dir: Path):
    return yaml.safe_load((output_dir / CONTEXT_FILENAME).read_text(encoding='utf-8'))


class TestPullOrchestrator:

    def test_no_manifests_is_a_successful_no_op(self, project):
        write(project / 'src' / 'main.py', 'print(1)')
        fetcher = StubFetcher()

        report = PullOrchestrator({}, fetcher).run(project)

        assert report.exit_code == 0
        assert report.directories == []
        assert fetcher.fetched == []
        assert list(project.rglob('spoketome')) == []

    def test_pulls_pages_and_writes_context(self, project):
        write(project / 'docs' / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")

        report = PullOrchestrator({}, StubFetcher(), version='0.1.0').run(project / 'docs')

        output_dir = project / 'docs' / 'spoketome'
        assert report.exit_code == 0
        assert report.succeeded == 2
        assert (output_dir / 'alpha.md').read_text() == '# Alpha\n'
        assert (output_dir / 'beta.md').exists()

        context = read_context(output_dir)
        assert context['generatedBy'] == 'spoketome@0.1.0'
        assert [p['filePath'] for p in context['pages']] == ['alpha.md', 'beta.md']
        assert context['pages'][0]['notionUrl'] == URL_A
        assert context['pages'][0]['properties'] == {'Status': 'Done'}

    def test_one_failure_and_one_success(self, project):
        write(project / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")
        fetcher = StubFetcher(failing={URL_A})

        report = PullOrchestrator({}, fetcher).run(project)

        assert fetcher.fetched == [URL_A, URL_B]
        assert report.succeeded == 1
        assert report.failed == 1
        assert report.exit_code == 1
        assert report.directories[0].errors[0]['url'] == URL_A

        context = read_context(project / 'spoketome')
        assert len(context['pages']) == 1
        assert context['pages'][0]['notionUrl'] == URL_B

    def test_failures_do_not_stop_other_directories(self, project):
        write(project / 'a' / BASE_MANIFEST, f"{URL_A}\n")
        write(project / 'b' / BASE_MANIFEST, f"{URL_B}\n")

        report = PullOrchestrator({}, StubFetcher(failing={URL_A})).run(project)

        assert report.exit_code == 1
        assert (project / 'b' / 'spoketome' / 'beta.md').exists()
        # Nothing succeeded in a/, so no run manifest is written there
        assert not (project / 'a' / 'spoketome' / CONTEXT_FILENAME).exists()

    def test_repeated_titles_get_suffixes(self, project):
        write(project / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n{URL_C}\n")
        fetcher = StubFetcher(titles={URL_A: 'Notes', URL_B: 'Notes', URL_C: 'notes!'})

        PullOrchestrator({}, fetcher).run(project)

        context = read_context(project / 'spoketome')
        assert [p['filePath'] for p in context['pages']] == ['notes.md', 'notes-1.md', 'notes-2.md']

    def test_rerun_replaces_previous_output(self, project):
        manifest = write(project / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")
        write(project / 'spoketome' / 'handwritten.md', 'mine')
        PullOrchestrator({}, StubFetcher()).run(project)

        manifest.write_text(f"{URL_B}\n", encoding='utf-8')
        PullOrchestrator({}, StubFetcher()).run(project)

        output_dir = project / 'spoketome'
        assert not (output_dir / 'alpha.md').exists()
        assert (output_dir / 'beta.md').exists()
        assert not (output_dir / 'beta-1.md').exists()
        assert (output_dir / 'handwritten.md').read_text() == 'mine'
        assert [p['filePath'] for p in read_context(output_dir)['pages']] == ['beta.md']

    def test_failed_rerun_keeps_previous_output(self, project):
        write(project / BASE_MANIFEST, f"{URL_A}\n")
        PullOrchestrator({}, StubFetcher()).run(project)

        report = PullOrchestrator({}, StubFetcher(failing={URL_A})).run(project)

        output_dir = project / 'spoketome'
        assert report.exit_code == 1
        assert not report.directories[0].context_written
        assert (output_dir / 'alpha.md').read_text() == '# Alpha\n'
        assert [p['filePath'] for p in read_context(output_dir)['pages']] == ['alpha.md']

    def test_partial_rerun_drops_files_of_failed_pages(self, project):
        write(project / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")
        PullOrchestrator({}, StubFetcher()).run(project)

        PullOrchestrator({}, StubFetcher(failing={URL_A})).run(project)

        output_dir = project / 'spoketome'
        assert not (output_dir / 'alpha.md').exists()
        assert (output_dir / 'beta.md').exists()
        assert [p['filePath'] for p in read_context(output_dir)['pages']] == ['beta.md']

    def test_override_resolution_end_to_end(self, project):
        write(project / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")
        write(project / OVERRIDE_MANIFEST, f"!{URL_A}\n{URL_C}\n")
        fetcher = StubFetcher()

        PullOrchestrator({}, fetcher).run(project)

        assert fetcher.fetched == [URL_B, URL_C]

    def test_dry_run_writes_nothing(self, project):
        write(project / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")
        fetcher = StubFetcher()

        report = PullOrchestrator({}, fetcher, dry_run=True).run(project)

        assert fetcher.fetched == []
        assert not (project / 'spoketome').exists()
        assert report.exit_code == 0
        assert report.directories[0].planned == [URL_A, URL_B]
        assert 'Would pull: ' + URL_A in report.format_console_report()

    def test_extra_skip_dirs_from_config(self, project):
        write(project / 'vendor' / BASE_MANIFEST, f"{URL_A}\n")
        write(project / 'docs' / BASE_MANIFEST, f"{URL_B}\n")
        fetcher = StubFetcher()

        PullOrchestrator({'discovery': {'extra_skip_dirs': ['vendor']}}, fetcher).run(project)

        assert fetcher.fetched == [URL_B]

    def test_console_report(self, project):
        write(project / BASE_MANIFEST, f"{URL_A}\n{URL_B}\n")

        report = PullOrchestrator({}, StubFetcher(failing={URL_B})).run(project)
        text = report.format_console_report()

        assert text.endswith('Done: 1 page(s) pulled, 1 failed.')
        assert URL_B in text
        assert report.to_dict()['summary']['failed'] == 1
