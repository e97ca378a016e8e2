# civitasfix/rq_connection.py
import redis
from rq import Queue

from .config import settings

# redis.from_url does not connect until the first command
redis_conn = redis.from_url(settings.REDIS_URL)

# Outbound notification emails
email_queue = Queue("emails", connection=redis_conn)
