"""Tests for the command-line scanner wrapper (mock-based)."""

import subprocess

import pytest
from unittest.mock import Mock, patch
from pathlib import Path

from platform_compat.database import Database
from platform_compat.scanner import CommandScanner, Observation, parse_observation
from platform_compat.symbol import SymbolIdentity


def test_parse_observation_full_record():
    obs = parse_observation(
        '{"docId": "M:A.B.C", "namespace": "A", "type": "B", "member": "C", '
        '"exception": "System.PlatformNotSupportedException"}'
    )
    assert obs == Observation(SymbolIdentity('M:A.B.C', 'A', 'B', 'C'),
                              'System.PlatformNotSupportedException')


def test_parse_observation_derives_names():
    obs = parse_observation('{"docId": "M:System.IO.File.Open(System.String)"}')
    assert obs.identity.namespace_name == 'System.IO'
    assert obs.identity.type_name == 'File'
    assert obs.identity.member_name == 'Open'
    assert obs.detail == ''


def test_parse_observation_invalid_json():
    with pytest.raises(ValueError, match='Invalid scanner output'):
        parse_observation('not json')


def test_parse_observation_missing_doc_id():
    with pytest.raises(ValueError, match='without docId'):
        parse_observation('{"namespace": "A"}')


@pytest.fixture
def mock_which():
    with patch('platform_compat.scanner.shutil.which') as mock:
        mock.return_value = '/usr/bin/ex-scan'
        yield mock


@patch('platform_compat.scanner.subprocess.run')
def test_command_scanner_scan(mock_run, mock_which):
    mock_run.return_value = Mock(
        returncode=0,
        stdout='{"docId": "T:System.Console"}\n\n{"docId": "M:System.Console.Beep"}\n',
        stderr='',
    )
    scanner = CommandScanner('ex-scan', ['--exceptions'])

    observations = list(scanner.scan(Path('/rt/System.Console.dll')))

    assert [o.identity.doc_id for o in observations] == ['T:System.Console', 'M:System.Console.Beep']
    cmd = mock_run.call_args[0][0]
    assert cmd == ['/usr/bin/ex-scan', '--exceptions', '/rt/System.Console.dll']


@patch('platform_compat.scanner.subprocess.run')
def test_command_scanner_failure(mock_run, mock_which):
    mock_run.return_value = Mock(returncode=2, stdout='', stderr='bad image format')

    with pytest.raises(RuntimeError, match='bad image format'):
        list(CommandScanner().scan(Path('/rt/broken.dll')))


@patch('platform_compat.scanner.subprocess.run')
def test_command_scanner_timeout(mock_run, mock_which):
    mock_run.side_effect = subprocess.TimeoutExpired(cmd='ex-scan', timeout=1)

    with pytest.raises(RuntimeError, match='timed out'):
        list(CommandScanner(timeout=1).scan(Path('/rt/slow.dll')))


def test_command_scanner_missing_executable():
    scanner = CommandScanner('definitely-not-a-real-scanner')

    with pytest.raises(RuntimeError, match='not found'):
        list(scanner.scan(Path('/rt/a.dll')))


@pytest.mark.parametrize('line', [
    '{"docId": 123}',
    '{"docId": ["M:A.B"]}',
    '{"docId": "   "}',
    '{"docId": null}',
    '["M:A.B"]',
])
def test_parse_observation_rejects_bad_doc_id(line):
    with pytest.raises(ValueError, match='without docId'):
        parse_observation(line)


def test_parse_observation_rejects_non_string_names():
    with pytest.raises(ValueError, match='non-string names'):
        parse_observation('{"docId": "M:A.B.C", "namespace": 1, "type": "B", "member": "C"}')


def test_parse_observation_strips_doc_id_consistently():
    with_names = parse_observation(
        '{"docId": " M:A.B.C ", "namespace": "A", "type": "B", "member": "C"}'
    )
    derived = parse_observation('{"docId": " M:A.B.C "}')

    assert with_names.identity.doc_id == 'M:A.B.C'
    assert derived.identity.doc_id == 'M:A.B.C'

    db = Database()
    db.add_identity(with_names.identity, 'win')
    db.add_identity(derived.identity, 'linux')
    assert len(db) == 1
    assert db.get('M:A.B.C').platforms == {'win', 'linux'}
