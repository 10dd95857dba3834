# Application & bind
wsgi_app = "space_auth:create_app()"
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS
# Threaded workers: a request blocked on DB/Redis I/O only holds its own thread
worker_class = "gthread"
threads = 4
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
