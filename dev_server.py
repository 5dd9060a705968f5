""" Development entry point: `flask --app dev_server run`.

    Metrics are collected in multiprocess mode, so the prometheus
    directory has to exist before prometheus_client is imported.
"""
import os
import shutil

os.environ.setdefault("SETTINGS_FILE", os.path.join(os.path.dirname(os.path.abspath(__file__)), "config", "development.cfg"))

prometheus_dir = os.environ.setdefault("PROMETHEUS_MULTIPROC_DIR", "var/prometheus")
shutil.rmtree(prometheus_dir, ignore_errors=True)
os.makedirs(prometheus_dir)

import prometheus_client.multiprocess  # noqa: E402

from main import create_app, db  # noqa: E402

app = create_app(dev_server=True)
parent_pid = os.getpid()


@app.before_request
def dispose_inherited_engine():
    # The reloader forks; a child mustn't reuse the parent's DB connections
    if os.getpid() != parent_pid:
        db.engine.dispose()


@app.after_request
def mark_worker_dead(response):
    # Keeps livesum/liveall gauges accurate across reloads
    prometheus_client.multiprocess.mark_process_dead(os.getpid())
    return response


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=int(os.environ.get("PORT", 5000)))
