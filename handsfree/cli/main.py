"""
Main entry point for HandsFree banking.
"""

import os
import sys
import logging

from handsfree.utils.config import config


def main():
    """Main entry point for the HandsFree banking assistant."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger(__name__)
    logger.info("🚀 Starting HandsFree Banking...")

    enable_voice = os.getenv("HANDSFREE_VOICE", "1") != "0"
    try:
        from handsfree.core.assistant import AssistantController
        controller = AssistantController(config, enable_voice=enable_voice)
        controller.start()

    except KeyboardInterrupt:
        logger.info("👋 Shutting down...")
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
