from app.config import settings

# Server socket
bind = f"{settings.HOST}:{settings.PORT}"
backlog = 2048

# Worker processes
workers = settings.WORKERS
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
# Server-sent event streams stay open, keep-alive comments keep them under the timeout
timeout = max(30, settings.EVENT_STREAM_KEEPALIVE_SECONDS * 2)
keepalive = 2

# Logging
accesslog = "-"
errorlog = "-"
loglevel = settings.get_log_level().lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "safekey_api"

# Server mechanics
daemon = False
pidfile = None
umask = 0
