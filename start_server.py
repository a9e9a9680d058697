#!/usr/bin/env python3
"""Start script that launches the allocation API under uvicorn, honouring the PORT environment variable."""

import logging
import os
import subprocess
import sys

logging.basicConfig(level=logging.INFO, format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s")

# Get PORT from environment, default to 8000
port = os.environ.get("PORT", "8000")

try:
    port_int = int(port)
except ValueError:
    logging.warning(f"Invalid PORT value '{port}', using default 8000")
    port_int = 8000

# The package is imported as src.foodbank, so the project root must be importable
project_root = os.path.dirname(os.path.abspath(__file__))
pythonpath = os.environ.get("PYTHONPATH", "")
os.environ["PYTHONPATH"] = f"{project_root}:{pythonpath}" if pythonpath else project_root

cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "src.foodbank.main:app",
    "--host",
    "0.0.0.0",
    "--port",
    str(port_int),
    "--proxy-headers",
    "--forwarded-allow-ips", "*",
]

logging.info(f"Starting server on port {port_int} from {project_root}")
try:
    result = subprocess.call(cmd, cwd=project_root)
    if result != 0:
        logging.error(f"Uvicorn exited with code {result}")
    sys.exit(result)
except KeyboardInterrupt:
    logging.info("Server interrupted by user")
    sys.exit(0)
