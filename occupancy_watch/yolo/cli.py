from __future__ import annotations

import argparse


def parse_args(argv: list | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Real-time occupancy monitoring with YOLO person detection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  occupancy-monitor --source webcam --threshold 5
  occupancy-monitor --source file --video lobby.mp4 --mode accurate
  occupancy-monitor --no-display --record --trend-plot trend.png

Keys while the window is focused:
  s  capture screenshot    r  start/stop recording    q  quit
		""",
    )

    parser.add_argument(
        "--source", type=str, choices=["webcam", "file"], default="webcam"
    )
    parser.add_argument("--video", type=str, default=None, help="Video file path")
    parser.add_argument("--camera", type=int, default=0)
    parser.add_argument("--width", type=int, default=1280)
    parser.add_argument("--height", type=int, default=720)
    parser.add_argument("--fps", type=int, default=30)
    parser.add_argument("--model", type=str, default="resources/models/yolov10m.onnx")
    parser.add_argument("--gpu", type=int, default=0)
    parser.add_argument(
        "--conf", type=float, default=0.5, help="Confidence cutoff in (0, 1)"
    )
    parser.add_argument(
        "--threshold", type=int, default=3, help="People count that raises an alert"
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=["fast", "normal", "accurate"],
        default="normal",
        help="Processing mode (30 / 100 / 250 ms between detection cycles)",
    )
    parser.add_argument("--target", type=str, default="person")
    parser.add_argument("--no-sound", action="store_true")
    parser.add_argument("--no-display", action="store_true")
    parser.add_argument(
        "--record",
        action="store_true",
        help="Start recording the annotated feed as soon as frames arrive",
    )
    parser.add_argument("--output-dir", type=str, default="captures")
    parser.add_argument(
        "--trend-plot",
        type=str,
        default=None,
        help="Save the occupancy trend chart to this path on exit",
    )
    parser.add_argument(
        "--reset-stats-on-start",
        action="store_true",
        help="Zero peak and cumulative counters whenever a session starts",
    )
    parser.add_argument(
        "--debug-output",
        action="store_true",
        help="Log raw model output shapes once at startup",
    )
    parser.add_argument("--json-logs", action="store_true")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )

    return parser.parse_args(argv)
