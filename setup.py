"""Packaging setup for the occupancy monitor."""

from pathlib import Path

from setuptools import find_packages, setup


dist_name = "Occupancy-Watch"
package_dir = "occupancy_watch"
version = Path("VERSION.txt").read_text().strip()

install_deps = [
    "loguru",
    "numpy",
    "opencv-python",
    "onnxruntime",
    "matplotlib",
]

# PortAudio bindings for the audible alert; alerts stay silent without them
audio_deps = ["pyaudio"]

test_deps = ["pytest"]

setup_kwargs = {
    "name": dist_name,
    "version": version,
    "zip_safe": False,
    "python_requires": ">=3.10",
    "packages": find_packages(include=[package_dir, f"{package_dir}.*"]),
    "include_package_data": True,
    "install_requires": install_deps,
    "extras_require": {
        "audio": audio_deps,
        "test": test_deps,
    },
    "entry_points": {
        "console_scripts": [
            "occupancy-monitor=occupancy_watch.yolo.monitor:run_occupancy_monitor",
        ],
    },
}

setup(**setup_kwargs)
