#!/usr/bin/env python3
"""
Development server with auto-restart functionality

Runs uvicorn against the local document store unless STORE_BACKEND says
otherwise, and restarts it whenever a Python or settings file changes.
"""

import os
import signal
import subprocess
import sys
import threading
import time
from pathlib import Path

from watchfiles import DefaultFilter, watch

from config import PORT, LOCAL_STORE_PATH, FALLBACK_STORE_PATH

WATCH_SUFFIXES = ('.py', '.yaml', '.yml')


class SourceFilter(DefaultFilter):
    """Source and settings files only; the local store's JSON files change on every write"""

    def __call__(self, change, path: str) -> bool:
        ignored = {os.path.abspath(LOCAL_STORE_PATH), os.path.abspath(FALLBACK_STORE_PATH)}
        return (
            super().__call__(change, path)
            and path.endswith(WATCH_SUFFIXES)
            and os.path.abspath(path) not in ignored
        )


def run_server():
    """Start the uvicorn server"""
    print(f"🚀 Starting Legendary Signatures API on port {PORT}...")
    cmd = [
        sys.executable, "-m", "uvicorn",
        "main:app",
        "--host", "0.0.0.0",
        "--port", str(PORT),
        "--log-level", "info"
    ]
    env = {**os.environ, "STORE_BACKEND": os.getenv("STORE_BACKEND", "local")}

    return subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        universal_newlines=True,
        bufsize=1,
        env=env
    )


def kill_server(process):
    """Gracefully kill the server process"""
    if process and process.poll() is None:
        print("🛑 Stopping server...")
        try:
            process.terminate()
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            print("⚠️  Force killing server...")
            process.kill()
            process.wait()


def stream_output(process):
    """Echo the server's output until it exits"""
    for line in iter(process.stdout.readline, ''):
        print(line.rstrip())
        if process.poll() is not None:
            break


def start(process_holder: dict):
    process_holder['process'] = run_server()
    threading.Thread(target=stream_output, args=(process_holder['process'],), daemon=True).start()


def main():
    """Main development server runner"""
    print("🔧 Legendary Signatures - Development Server")
    print("⏹️  Press Ctrl+C to stop\n")

    holder = {'process': None}

    def signal_handler(signum, frame):
        print("\n📊 Shutting down development server...")
        kill_server(holder['process'])
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    watch_path = Path(__file__).resolve().parent
    try:
        start(holder)
        print(f"👀 Watching {', '.join(WATCH_SUFFIXES)} files in {watch_path}\n")

        for changes in watch(watch_path, watch_filter=SourceFilter()):
            print("\n🔄 File changes detected:")
            for change_type, file_path in changes:
                print(f"   {change_type.name}: {Path(file_path).name}")

            print("🔄 Restarting server...\n")
            kill_server(holder['process'])
            time.sleep(1)
            start(holder)

    except KeyboardInterrupt:
        print("\n📊 Development server stopped by user")
    finally:
        kill_server(holder['process'])


if __name__ == "__main__":
    main()
