""" Production entry point. SETTINGS_FILE must name the config file. """
from werkzeug.middleware.proxy_fix import ProxyFix
from main import create_app

# We sit behind exactly one proxy, which sets X-Forwarded-For and X-Forwarded-Proto
app = ProxyFix(create_app(), x_for=1, x_proto=1)
