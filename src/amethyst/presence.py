"""Default presence handler: records now-playing status in the log.

Register a different ``update-presence`` handler on the host bridge to push
status to a chat client or status bar instead.
"""

from loguru import logger


async def update_presence(
    title: str, total_time: str, elapsed_time: str, is_playing: bool
) -> None:
    state = "playing" if is_playing else "paused"
    logger.trace(f"presence: {title} [{elapsed_time}/{total_time}] {state}")
