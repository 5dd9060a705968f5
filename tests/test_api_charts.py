from datetime import datetime

import pytest

from models.chart import ChartRelease, ChartType


@pytest.fixture(scope="module")
def chart_type(db):
    chart_type = ChartType("Top Ten", "The ten most played tracks each week")
    db.session.add(chart_type)
    db.session.add(ChartRelease(chart_type, datetime(2025, 12, 1, 18)))
    db.session.commit()
    return chart_type


def test_list_chart_types(client, chart_type):
    rv = client.get("/api/charts")
    assert rv.status_code == 200
    assert rv.json == [
        {
            "id": chart_type.id,
            "name": "Top Ten",
            "description": "The ten most played tracks each week",
            "releases": 1,
        }
    ]


def test_chart_type_releases(client, chart_type):
    rv = client.get(f"/api/charts/{chart_type.id}")
    assert rv.status_code == 200
    assert rv.json["release_dates"] == ["2025-12-01T18:00:00"]


def test_unknown_chart_type(client):
    assert client.get("/api/charts/9999").status_code == 404
