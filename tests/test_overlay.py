"""Tests for inclusion/exclusion composition."""

import io

import pytest

from platform_compat.csv_codec import export_csv
from platform_compat.overlay import create_database, load_exclusions


@pytest.fixture
def inclusion_file(tmp_path):
    path = tmp_path / 'inclusions.csv'
    path.write_text('DocId,Namespace,Type,Member,win\nM:A.B,A,B,C,X\n')
    return path


@pytest.fixture
def exclusion_file(tmp_path):
    path = tmp_path / 'exclusions.csv'
    path.write_text('DocId,Namespace,Type,Member,linux\nM:X.Y,X,Y,,X\n')
    return path


def test_load_exclusions_is_frozen(exclusion_file):
    exclusions = load_exclusions(exclusion_file)

    assert 'M:X.Y' in exclusions
    assert exclusions.frozen
    with pytest.raises(RuntimeError):
        exclusions.add('M:Q.R', 'Q', 'R', '', 'win')


def test_create_database_without_curated_data():
    db = create_database()
    assert len(db) == 0
    assert db.exclusions is None


def test_inclusion_then_scan(inclusion_file):
    db = create_database(inclusion_file=inclusion_file)

    # scan observations carry derived names; the seeded names win
    db.add('M:A.B', '', 'A', 'B', 'win')
    db.add('M:A.B', '', 'A', 'B', 'osx')

    entry = db.get('M:A.B')
    assert entry.platforms == {'win', 'osx'}
    assert (entry.namespace_name, entry.type_name, entry.member_name) == ('A', 'B', 'C')

    buf = io.StringIO()
    export_csv(db, buf)
    assert buf.getvalue().splitlines() == [
        'DocId,Namespace,Type,Member,win,osx',
        'M:A.B,A,B,C,X,X',
    ]


def test_exclusion_drops_scan_observation(exclusion_file):
    db = create_database(exclusion_file=exclusion_file)

    db.add('M:X.Y', 'X', 'Y', '', 'linux')
    db.add('M:X.Y', 'X', 'Y', '', 'win')

    assert 'M:X.Y' not in db
    assert db.platforms == ()


def test_exclusion_also_filters_inclusions(tmp_path, exclusion_file):
    inclusions = tmp_path / 'inclusions.csv'
    inclusions.write_text('DocId,Namespace,Type,Member,win\nM:X.Y,X,Y,,X\nM:A.B,A,B,C,X\n')

    db = create_database(inclusion_file=inclusions, exclusion_file=exclusion_file)

    assert 'M:X.Y' not in db
    assert 'M:A.B' in db


def test_preloaded_exclusions_take_precedence(tmp_path, exclusion_file):
    other = tmp_path / 'other.csv'
    other.write_text('DocId,Namespace,Type,Member,win\nM:A.B,A,B,C,X\n')
    exclusions = load_exclusions(exclusion_file)

    db = create_database(exclusion_file=other, exclusions=exclusions)

    assert db.exclusions is exclusions


def test_missing_inclusion_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        create_database(inclusion_file=tmp_path / 'missing.csv')
