"""
Pocket Ledger - Main Entry Point

Builds the Pygame UI, registers the ledger screen, and runs the main event
loop.  The floating calculator is opened and closed from the nav bar; it
lives on the UIManager's overlay layer and is discarded when closed.
"""

import logging
import sys
import time

import config
from ui_manager import UIManager
from screen_ledger import ScreenLedger

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(levelname)s %(name)s: %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)


def main() -> None:
    mgr = UIManager()

    ledger = ScreenLedger(mgr)
    mgr.register_screen("ledger", ledger)
    mgr.switch_to("ledger")

    log.info("Pocket Ledger started (%dx%d)", config.SCREEN_W, config.SCREEN_H)

    last_t = time.monotonic()

    try:
        running = True
        while running:
            now = time.monotonic()
            dt  = now - last_t
            last_t = now

            running = mgr.handle_events()
            mgr.update(dt)
            mgr.draw()

    finally:
        # Closing the overlay releases any drag / resize listeners.
        mgr.unmount_overlay()
        import pygame
        pygame.quit()
        log.info("Pygame quit")


if __name__ == "__main__":
    main()
