#!/usr/bin/env python
"""
Start the API server and, when CLIENT_DEV_COMMAND is set, the client dev
server next to it. Ctrl+C / SIGTERM are passed on to both children; the
launcher exits with the first non-zero child exit code.
"""
import os
import shlex
import signal
import subprocess
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from print_erp.core.config import settings
from print_erp.core.logging_config import setup_logging, get_logger

logger = get_logger("run")


def server_command():
    return [
        sys.executable, "-m", "uvicorn", "print_erp.main:app",
        "--host", settings.HOST,
        "--port", str(settings.PORT),
    ]


def main() -> int:
    setup_logging()
    commands = {"server": server_command()}
    if settings.CLIENT_DEV_COMMAND:
        commands["client"] = shlex.split(settings.CLIENT_DEV_COMMAND)

    children = {}
    for name, command in commands.items():
        logger.info(f"Starting {name}: {' '.join(command)}")
        children[name] = subprocess.Popen(command)

    def forward(signum, frame):
        for name, child in children.items():
            if child.poll() is None:
                logger.info(f"Forwarding signal {signum} to {name}")
                child.send_signal(signum)

    signal.signal(signal.SIGINT, forward)
    signal.signal(signal.SIGTERM, forward)

    exit_code = 0
    while children:
        for name, child in list(children.items()):
            code = child.poll()
            if code is None:
                continue
            logger.info(f"{name} exited with code {code}")
            del children[name]
            if code != 0 and exit_code == 0:
                exit_code = code
                # one side died: take the other one down too
                forward(signal.SIGTERM, None)
        time.sleep(0.2)

    return exit_code


if __name__ == '__main__':
    sys.exit(main())
