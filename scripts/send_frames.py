#!/usr/bin/env python3
"""
Producer Simulator
==================

Standalone script that plays the role of the renderer.

This script:
    1. Connects to a running frame relay over WebSocket
    2. Renders a moving test card every 1/fps seconds
    3. Sends it as a data:image/... string (or raw PNG bytes with --binary)
    4. Logs send stats every few seconds and a final summary

Prerequisites:
    - The relay must be running at the configured URL
    - Install dependencies: pip install -e .

Usage:
    python scripts/send_frames.py --duration 30
    python scripts/send_frames.py --url ws://localhost:8080/ --fps 30 --binary
"""

import argparse
import asyncio
import base64
import logging
import os
import sys
import time

import cv2
import numpy as np
import websockets
from websockets.exceptions import ConnectionClosed

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from frame_relay.ingest.transcoder import encode_image
from frame_relay.models.frame import OutputFormat


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def render_test_card(index: int, width: int, height: int) -> np.ndarray:
    """Gradient background with a bar that sweeps across the frame."""
    x = np.linspace(0, 255, width, dtype=np.uint8)
    card = np.zeros((height, width, 3), dtype=np.uint8)
    card[:, :, 0] = x[np.newaxis, :]
    card[:, :, 1] = (index * 4) % 256
    card[:, :, 2] = x[::-1][np.newaxis, :]

    bar_x = (index * 8) % max(width, 1)
    cv2.rectangle(card, (bar_x, 0), (min(bar_x + 16, width - 1), height - 1), (255, 255, 255), -1)
    cv2.putText(
        card,
        f"frame {index}",
        (10, max(height // 2, 20)),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.8,
        (0, 0, 0),
        2,
    )
    return card


def build_message(index: int, width: int, height: int, binary: bool):
    png = encode_image(render_test_card(index, width, height), OutputFormat.PNG, quality=100)
    if binary:
        return png
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


async def run_producer(
    url: str,
    duration: int,
    fps: float,
    width: int,
    height: int,
    binary: bool,
    report_interval: int,
) -> dict:
    """
    Send frames for ``duration`` seconds.

    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info("Frame Relay Producer Simulator")
    logger.info("=" * 60)
    logger.info(f"Relay URL: {url}")
    logger.info(f"Duration: {duration} seconds @ {fps} fps")
    logger.info(f"Frame size: {width}x{height} ({'raw PNG' if binary else 'data URI'})")
    logger.info("=" * 60)

    frames_sent = 0
    bytes_sent = 0
    interval = 1.0 / fps
    start_time = time.time()
    last_report_time = start_time

    try:
        async with websockets.connect(url, max_size=None) as ws:
            logger.info(f"Connected to relay: {url}")

            while time.time() - start_time < duration:
                message = build_message(frames_sent, width, height, binary)
                await ws.send(message)
                frames_sent += 1
                bytes_sent += len(message)

                if time.time() - last_report_time >= report_interval:
                    elapsed = time.time() - start_time
                    logger.info(
                        f"Sent {frames_sent} frames, {bytes_sent / 1024 / 1024:.2f} MB "
                        f"(elapsed: {elapsed:.0f}s)"
                    )
                    last_report_time = time.time()

                await asyncio.sleep(interval)

    except ConnectionClosed as e:
        logger.warning(f"Connection closed by relay: {e}")
    except OSError as e:
        logger.error(f"Could not connect to {url}: {e}")
    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    total_time = time.time() - start_time
    avg_fps = frames_sent / total_time if total_time > 0 else 0

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Frames sent: {frames_sent}")
    logger.info(f"Average FPS: {avg_fps:.1f}")
    logger.info(f"Data sent: {bytes_sent / 1024 / 1024:.2f} MB")
    logger.info("=" * 60)

    return {
        "duration": total_time,
        "frames_sent": frames_sent,
        "bytes_sent": bytes_sent,
        "avg_fps": avg_fps,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Send generated frames to a frame relay"
    )
    parser.add_argument(
        "--url",
        type=str,
        default=os.environ.get("FRAME_RELAY_URL", "ws://localhost:8080/"),
        help="WebSocket URL of the relay",
    )
    parser.add_argument("--duration", type=int, default=30, help="Seconds to run (default: 30)")
    parser.add_argument("--fps", type=float, default=10.0, help="Frames per second (default: 10)")
    parser.add_argument("--width", type=int, default=640, help="Frame width (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Frame height (default: 360)")
    parser.add_argument(
        "--binary",
        action="store_true",
        help="Send raw PNG bytes instead of data URIs",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=5,
        help="Seconds between progress reports (default: 5)",
    )

    args = parser.parse_args()

    result = asyncio.run(run_producer(
        url=args.url,
        duration=args.duration,
        fps=args.fps,
        width=args.width,
        height=args.height,
        binary=args.binary,
        report_interval=args.report_interval,
    ))

    sys.exit(0 if result["frames_sent"] > 0 else 1)


if __name__ == "__main__":
    main()
