"""End-to-end tests for the command line entry point."""

import json
import sys

import pytest

import notion_export

PAGE_DUMP = {
    'page': {
        'id': 'page-1',
        'properties': {
            'Name': {'type': 'title', 'title': [{'type': 'text', 'text': {'content': 'Hello World'}}]},
        },
    },
    'blocks': [
        {'id': 'h', 'type': 'heading_1', 'heading_1': {'rich_text': [{'type': 'text', 'text': {'content': 'Intro'}}]}},
    ],
}


@pytest.fixture
def dump(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / 'page.json'
    path.write_text(json.dumps(PAGE_DUMP), encoding='utf-8')
    return path


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, 'argv', ['notion-export', *argv])
    return notion_export.main()


def test_dry_run_prints_document(dump, monkeypatch, capsys):
    exit_code = run_cli(monkeypatch, '--input', str(dump), '--dry-run', '--no-download')

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out == (
        f'<!-- {dump} -->\n'
        '---\n'
        'name: Hello World\n'
        'title: Hello World\n'
        '---\n'
        '# Intro\n\n'
        '\n'
    )
    assert not (dump.parent / 'content').exists()


def test_writes_page_file(dump, monkeypatch):
    exit_code = run_cli(monkeypatch, '--input', str(dump), '--output-dir', 'out', '--no-download')

    assert exit_code == 0
    assert (dump.parent / 'out' / 'hello-world.md').read_text(encoding='utf-8').endswith('# Intro\n\n')


def test_failed_page_sets_exit_code(dump, monkeypatch):
    exit_code = run_cli(monkeypatch, '--input', str(dump), '--input', 'missing.json', '--no-download')

    assert exit_code == 1
    assert (dump.parent / 'content' / 'posts' / 'hello-world.md').exists()


def test_missing_config_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    assert run_cli(monkeypatch, '--config', 'absent.yaml') == 2
    assert 'File not found' in capsys.readouterr().err


def test_api_mode_without_token_is_config_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    assert run_cli(monkeypatch, '--page-id', 'abc') == 2
    assert 'notion.api_token' in capsys.readouterr().err
