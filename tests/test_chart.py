from datetime import datetime

import pytest

from models.chart import ChartRelease, ChartType


@pytest.fixture(scope="module")
def chart_types(db):
    top_ten = ChartType("Top Ten", "The ten most played tracks each week")
    playlist = ChartType("Playlist", "Tracks the station is playlisting")
    db.session.add_all([top_ten, playlist])
    db.session.add_all([
        ChartRelease(top_ten, datetime(2025, 12, 1)),
        ChartRelease(top_ten, datetime(2025, 12, 8)),
    ])
    db.session.commit()
    return top_ten, playlist


def test_get_all_is_ordered_by_id(chart_types):
    assert ChartType.get_all() == list(chart_types)


def test_number_of_releases(chart_types):
    top_ten, playlist = chart_types
    assert top_ten.number_of_releases == 2
    assert playlist.number_of_releases == 0


def test_releases_are_newest_first(chart_types):
    top_ten, _ = chart_types
    assert [r.submitted for r in top_ten.releases] == [datetime(2025, 12, 8), datetime(2025, 12, 1)]


def test_setters_chain(db, chart_types):
    _, playlist = chart_types
    playlist.set_name("A List").set_description("Heavy rotation")
    db.session.commit()

    assert playlist.name == "A List"
    assert playlist.description == "Heavy rotation"


@pytest.mark.parametrize("name, description", [("", "Something"), ("Something", "")])
def test_chart_type_fields_are_required(name, description):
    with pytest.raises(ValueError):
        ChartType(name, description)


def test_chart_type_changes_are_versioned(db, chart_types):
    top_ten, _ = chart_types
    top_ten.set_description("The ten most played tracks")
    db.session.commit()

    assert [v.description for v in top_ten.versions][-1] == "The ten most played tracks"
    assert top_ten.versions.count() >= 2


def test_get_by_id(chart_types):
    top_ten, _ = chart_types
    assert ChartType.get_by_id(top_ten.id) is top_ten
    assert ChartType.get_by_id(9999) is None
