"""
Unit tests for the command-line interface.

Covers argument parsing, output formatting, subcommand dispatch against a
stub service, and the configuration error path.
"""

import asyncio
import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from roambridge.cli import main as cli_main
from roambridge.cli.main import (
    create_argument_parser, format_blocks_as_markdown, load_import_items, main, run_command
)


class TestArgumentParser:
    """Test command-line parsing."""

    def test_note_command(self):
        """Test the note text is captured."""
        args = create_argument_parser().parse_args(['note', 'Buy milk'])

        assert args.command == 'note'
        assert args.text == 'Buy milk'
        assert args.headless is None
        assert args.skip_download is None

    def test_delete_limit_defaults_to_one(self):
        """Test deletion removes a single block unless told otherwise."""
        args = create_argument_parser().parse_args(['delete', '[:find ?uid]'])

        assert args.limit == 1

    def test_global_flags(self):
        """Test global flags come before the subcommand."""
        args = create_argument_parser().parse_args([
            '--graph', 'g', '--no-headless', '--working-dir', '/tmp', '--skip-download',
            'export', '--keep-archive', '-o', 'graph.json'
        ])

        assert args.graph == 'g'
        assert args.headless is False
        assert args.working_dir == Path('/tmp')
        assert args.skip_download is True
        assert args.keep_archive is True
        assert args.output == Path('graph.json')

    def test_command_required(self):
        """Test a subcommand must be given."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args([])


class TestOutputHelpers:
    """Test formatting and file loading helpers."""

    def test_markdown_list(self):
        """Test each row becomes a bullet of its first column."""
        rows = [["First block", "uid1"], ["Second block", "uid2"]]

        assert format_blocks_as_markdown(rows) == "- First block\n- Second block\n"

    def test_markdown_empty(self):
        """Test no rows render as an empty string."""
        assert format_blocks_as_markdown([]) == ""

    def test_load_import_items(self, tmp_path):
        """Test a JSON list is loaded."""
        path = tmp_path / "items.json"
        path.write_text(json.dumps([{"title": "Page"}]))

        assert load_import_items(path) == [{"title": "Page"}]

    def test_load_import_items_requires_list(self, tmp_path):
        """Test other JSON values are rejected."""
        path = tmp_path / "items.json"
        path.write_text(json.dumps({"title": "Page"}))

        with pytest.raises(ValueError, match="must contain a JSON list"):
            load_import_items(path)


class TestMainErrors:
    """Test failures are reported with a non-zero exit code."""

    @pytest.mark.asyncio
    async def test_missing_credentials(self, monkeypatch, tmp_path, capsys):
        """Test missing credentials fail before any browser starts."""
        for name in ('ROAM_GRAPH', 'ROAM_EMAIL', 'ROAM_PASSWORD'):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)

        exit_code = await main(['-q', 'daily'])

        assert exit_code == 1
        assert "ROAM_GRAPH" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_missing_working_directory(self, monkeypatch, tmp_path, capsys):
        """Test an invalid working directory is reported."""
        monkeypatch.setenv('ROAM_GRAPH', 'g')
        monkeypatch.setenv('ROAM_EMAIL', 'me@example.com')
        monkeypatch.setenv('ROAM_PASSWORD', 'pw')
        monkeypatch.chdir(tmp_path)

        exit_code = await main(['--working-dir', str(tmp_path / "missing"), 'daily'])

        assert exit_code == 1
        assert "Invalid working_directory: does not exist" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_settings_validated_before_launch(self, monkeypatch, tmp_path, capsys):
        """Test a malformed base URL is rejected before the service is built."""
        monkeypatch.setenv('ROAM_GRAPH', 'g')
        monkeypatch.setenv('ROAM_EMAIL', 'me@example.com')
        monkeypatch.setenv('ROAM_PASSWORD', 'pw')
        monkeypatch.setenv('ROAM_BASE_URL', 'ftp://roamresearch.com/')
        monkeypatch.chdir(tmp_path)

        def fail_if_built(*args, **kwargs):
            raise AssertionError("service built despite invalid settings")

        monkeypatch.setattr(cli_main, 'create_graph_service_from_config', fail_if_built)

        exit_code = await main(['-q', 'daily'])

        assert exit_code == 1
        assert "Invalid base_url" in capsys.readouterr().err


class StubService:
    """Graph service stand-in recording calls"""

    def __init__(self):
        self.calls = []

    def daily_note_uid(self):
        return "10-17-2026"

    async def create_daily_note_block(self, text):
        self.calls.append(('note', text))

    async def get_all_blocks_on_daily_note(self):
        return [["First", "uid1"], ["Second", "uid2"]]

    async def run_query(self, query):
        self.calls.append(('query', query))
        return [["uid1"]]

    async def delete_blocks_matching_query(self, query, limit):
        self.calls.append(('delete', query, limit))
        return [["uid1"]] * min(limit, 2)

    async def export_graph(self, auto_remove_archive=False):
        self.calls.append(('export', auto_remove_archive))
        return [{"title": "Page"}]

    async def import_blocks(self, items):
        self.calls.append(('import', items))
        return []


def run(argv):
    console = Console(file=io.StringIO(), width=200)
    service = StubService()
    args = create_argument_parser().parse_args(argv)
    asyncio.run(run_command(service, args, console))
    return service, console.file.getvalue()


class TestRunCommand:
    """Test subcommand dispatch."""

    def test_note(self):
        """Test note adds a block to the daily note."""
        service, output = run(['note', 'Buy milk'])

        assert service.calls == [('note', 'Buy milk')]
        assert "10-17-2026" in output

    def test_daily_prints_markdown(self):
        """Test daily prints the blocks as a Markdown list."""
        _, output = run(['daily'])

        assert output == "- First\n- Second\n"

    def test_delete_passes_limit(self):
        """Test the limit reaches the service."""
        service, output = run(['delete', '[:find ?uid]', '--limit', '3'])

        assert service.calls == [('delete', '[:find ?uid]', 3)]
        assert "Deleted 2 block(s)" in output

    def test_export_removes_archive_by_default(self, tmp_path):
        """Test the archive is removed unless --keep-archive is given."""
        target = tmp_path / "graph.json"
        service, _ = run(['export', '-o', str(target)])

        assert service.calls == [('export', True)]
        assert json.loads(target.read_text(encoding='utf-8')) == [{"title": "Page"}]

    def test_import_reads_file(self, tmp_path):
        """Test import loads the JSON list and hands it over."""
        path = tmp_path / "items.json"
        path.write_text('[{"title": "Page"}]')

        service, output = run(['import', str(path)])

        assert service.calls == [('import', [{"title": "Page"}])]
        assert "Imported 1 item(s)" in output
