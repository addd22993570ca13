import logging

from tagline import TagFilter, tag

handler = logging.StreamHandler()
handler.addFilter(TagFilter())
handler.setFormatter(logging.Formatter("%(levelname)s %(message)s [%(tag_pairs)s]"))

logger = logging.getLogger("app")
logger.addHandler(handler)
logger.setLevel(logging.INFO)

with tag("env", "prod"), tag("request_id", "abc123"):
    logger.info("handling request")

logger.info("outside of request")
