from main import create_app
from models.schedule import MetadataStore, Show

URLS = [
    "/metrics",
    "/api/schedule/metadata-keys",
    "/api/charts",
]


def test_url(client):
    for url in URLS:
        rv = client.get(url)
        assert rv.status_code == 200, "Fetching %s results in HTTP 200" % url


def test_metrics_include_schedule_gauges(client, db, user, metadata_keys):
    show = Show(user)
    db.session.add(show)
    MetadataStore(metadata_keys).set_value(show, "title", "Counted", user.id)
    db.session.commit()

    rv = client.get("/metrics")
    body = rv.get_data(as_text=True)
    assert 'myury_metadata_values{owner="show",key="title",state="current"} 1.0' in body


CACHE_CHECK_CONFIG = {"TESTING": False, "CACHE_TYPE": "SimpleCache"}


def test_per_process_cache_warning(app, caplog):
    create_app(config_override=CACHE_CHECK_CONFIG)
    assert "Per-process cache" in caplog.text


def test_dev_server_skips_cache_check(app, caplog):
    create_app(dev_server=True, config_override=CACHE_CHECK_CONFIG)
    assert "Per-process cache" not in caplog.text
