"""
Amethyst daemon: wires config, settings, host bridge, player and IPC together.
"""

import asyncio
import signal
import sys
from typing import Optional

from loguru import logger

from amethyst.context import PlayerContext
from amethyst.core import config as config_module
from amethyst.core.config import Config
from amethyst.core.exceptions import TransportError
from amethyst.core.output import log, setup_from_config
from amethyst.core.settings import SettingsStore, get_settings_path
from amethyst.domain.playback import Player, TransportFactory
from amethyst.domain.playback.mpv import MpvBackend
from amethyst.host import HostBridge
from amethyst.ipc.server import IPCServer, get_socket_path


def build_player(
    config: Config,
    transport_factory: TransportFactory,
    settings: Optional[SettingsStore] = None,
    host: Optional[HostBridge] = None,
) -> Player:
    """Create a player with the default host handlers and restore saved state."""
    settings = settings or SettingsStore(get_settings_path())
    host = host or HostBridge.with_defaults(config)
    context = PlayerContext.create(config, settings, host)
    player = Player(context, transport_factory)
    player.restore()
    return player


async def run(config: Config) -> None:
    """Run until SIGINT/SIGTERM."""
    backend = MpvBackend(config.player)
    await asyncio.to_thread(backend.start)

    player = build_player(config, backend.open)

    server: Optional[IPCServer] = None
    if config.ipc.enabled:
        server = IPCServer(player, get_socket_path(config.ipc.socket_path))
        await server.start()

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    log(f"Amethyst ready (volume {player.volume:.0%}, {len(player.queue)} tracks queued)")
    try:
        await stop.wait()
    finally:
        logger.info("Shutting down")
        if server:
            await server.stop()
        await player.shutdown()
        backend.stop()


def serve() -> None:
    """Load configuration, set up logging and run the daemon."""
    config_module.ensure_directories()
    config = config_module.load_config()
    setup_from_config(config.logging)
    try:
        asyncio.run(run(config))
    except TransportError as e:
        log(f"Cannot start audio output: {e}", level="error")
        sys.exit(1)
