#!/usr/bin/env python
"""
Start the Pricer API under uvicorn.

Usage:
    python scripts/run_api.py [--host 127.0.0.1] [--port 8000] [--no-reload]

The uvicorn log level follows PRICER_LOG_LEVEL (settings.log_level).
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from pricer.config.settings import get_settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the Pricer API")
    parser.add_argument('--host', default="0.0.0.0")
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--no-reload', dest='reload', action='store_false')
    return parser.parse_args(argv)


def uvicorn_command(args, log_level: str) -> list[str]:
    command = [
        sys.executable, "-m", "uvicorn", "pricer.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
        "--log-level", log_level.lower(),
    ]
    if args.reload:
        command += ["--reload", "--reload-dir", str(src_path)]
    return command


def main(argv=None):
    args = parse_args(argv)
    settings = get_settings()

    # The server process resolves the same project root and data dirs
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(src_path), env.get("PYTHONPATH")]))
    env.setdefault("PRICER_PROJECT_ROOT", str(settings.project_root))

    print(f"Starting Pricer API on {args.host}:{args.port} "
          f"(catalogs: {settings.catalogs_dir}, log level: {settings.log_level})")
    try:
        subprocess.run(uvicorn_command(args, settings.log_level), env=env, check=False)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
